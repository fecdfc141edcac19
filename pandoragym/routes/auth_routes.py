from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.orm import Session

from pandoragym.auth import jwt_handler
from pandoragym.auth.dependencies import get_settings
from pandoragym.core.config import Settings
from pandoragym.database import get_db
from pandoragym.models.user import Role
from pandoragym.routes.user_routes import UserEnvelope, UserResponse
from pandoragym.services.user_service import UserService

router = APIRouter(tags=['auth'])

MIN_PASSWORD_LENGTH = 6
# bcrypt refuses passwords longer than 72 bytes once encoded.
MAX_PASSWORD_BYTES = 72


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=30)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_BYTES)

    @field_validator('name', 'phone', mode='before')
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator('password')
    @classmethod
    def validate_password_bytes(cls, value: str) -> str:
        if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise ValueError(f'must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded')
        return value


class SessionRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)


class SessionResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = 'bearer'
    expires_in: int


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def _register(data: RegisterRequest, role: Role, service: UserService) -> dict:
    user = service.register(
        name=data.name,
        email=data.email,
        phone=data.phone,
        password=data.password,
        role=role,
    )
    return {'user': user}


@router.post('/register/student', response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register_student(data: RegisterRequest, service: UserService = Depends(get_user_service)):
    return _register(data, Role.STUDENT, service)


@router.post('/register/personal', response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register_personal(data: RegisterRequest, service: UserService = Depends(get_user_service)):
    return _register(data, Role.PERSONAL, service)


@router.post('/session', response_model=SessionResponse)
def create_session(
    data: SessionRequest,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    user = service.authenticate(data.email, data.password)
    token = jwt_handler.create_access_token(subject=str(user.id), settings=settings)
    return {
        'user': user,
        'token': token,
        'token_type': 'bearer',
        'expires_in': settings.jwt_expires_minutes * 60,
    }
