import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.orm import Session

from pandoragym.auth.dependencies import get_current_user
from pandoragym.core.timeutils import as_utc
from pandoragym.database import get_db
from pandoragym.models.user import Role, User
from pandoragym.services.user_service import UserService

router = APIRouter(tags=['users'])


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str
    avatar_url: str | None = None
    role: Role
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator('created_at', 'updated_at')
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class UserEnvelope(BaseModel):
    user: UserResponse


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=1, max_length=30)

    @field_validator('name', 'phone', mode='before')
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


@router.get('/profile', response_model=UserEnvelope)
def get_profile(current_user: User = Depends(get_current_user)):
    return {'user': current_user}


@router.put('/profile', response_model=UserEnvelope)
def update_profile(
    data: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_profile(
        current_user,
        name=data.name,
        email=data.email,
        phone=data.phone,
    )
    return {'user': user}
