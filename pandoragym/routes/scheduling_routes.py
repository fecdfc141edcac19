import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from pandoragym.auth.dependencies import get_current_user
from pandoragym.core.timeutils import as_utc
from pandoragym.database import get_db
from pandoragym.models.scheduling import SchedulingStatus, SchedulingType
from pandoragym.models.user import User
from pandoragym.services.scheduling_service import (
    MAX_CANCEL_REASON_LENGTH,
    MIN_CANCEL_REASON_LENGTH,
    SchedulingService,
)

router = APIRouter(tags=['schedulings'])

MAX_NOTES_LENGTH = 1000


class CreateSchedulingRequest(BaseModel):
    personal_id: uuid.UUID
    student_id: uuid.UUID
    workout_id: uuid.UUID | None = None
    date: datetime
    type: SchedulingType
    # Accepted for compatibility; new schedulings always start pending confirmation.
    status: SchedulingStatus | None = None


class UpdateSchedulingRequest(BaseModel):
    date: datetime | None = None
    type: SchedulingType | None = None
    status: SchedulingStatus | None = None
    workout_id: uuid.UUID | None = None


class CancelSchedulingRequest(BaseModel):
    reason: str = Field(min_length=MIN_CANCEL_REASON_LENGTH, max_length=MAX_CANCEL_REASON_LENGTH)
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)

    @field_validator('reason', mode='before')
    @classmethod
    def strip_reason(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class SchedulingResponse(BaseModel):
    id: uuid.UUID
    personal_id: uuid.UUID
    student_id: uuid.UUID
    workout_id: uuid.UUID | None = None
    date: datetime
    type: SchedulingType
    status: SchedulingStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    user_id: uuid.UUID | None = None

    class Config:
        from_attributes = True

    @field_validator('date', 'started_at', 'completed_at', 'created_at')
    @classmethod
    def mark_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class SchedulingHistoryResponse(BaseModel):
    id: uuid.UUID
    schedule_id: uuid.UUID
    user_id: uuid.UUID
    status: SchedulingStatus
    changed_at: datetime
    changed_by: str
    reason: str | None = None
    notes: str | None = None

    class Config:
        from_attributes = True

    @field_validator('changed_at')
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class SchedulingEnvelope(BaseModel):
    scheduling: SchedulingResponse


class SchedulingListEnvelope(BaseModel):
    schedulings: list[SchedulingResponse]


class SchedulingHistoryEnvelope(BaseModel):
    history: list[SchedulingHistoryResponse]


class MessageResponse(BaseModel):
    message: str


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    return SchedulingService(db)


@router.get('', response_model=SchedulingListEnvelope)
def list_schedulings(
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return {'schedulings': service.list_schedulings(current_user)}


@router.post('', response_model=SchedulingEnvelope, status_code=status.HTTP_201_CREATED)
def create_scheduling(
    data: CreateSchedulingRequest,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    scheduling = service.create_scheduling(
        current_user,
        personal_id=data.personal_id,
        student_id=data.student_id,
        workout_id=data.workout_id,
        date=data.date,
        scheduling_type=data.type,
    )
    return {'scheduling': scheduling}


@router.get('/{scheduling_id}', response_model=SchedulingEnvelope)
def get_scheduling(
    scheduling_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return {'scheduling': service.get_scheduling(scheduling_id, current_user)}


@router.put('/{scheduling_id}', response_model=MessageResponse)
def update_scheduling(
    scheduling_id: uuid.UUID,
    data: UpdateSchedulingRequest,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    service.update_scheduling(
        scheduling_id,
        current_user,
        date=data.date,
        scheduling_type=data.type,
        status=data.status,
        workout_id=data.workout_id,
    )
    return {'message': 'Scheduling updated successfully'}


@router.delete('/{scheduling_id}', response_model=MessageResponse)
def cancel_scheduling(
    scheduling_id: uuid.UUID,
    data: CancelSchedulingRequest,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    service.cancel_scheduling(scheduling_id, current_user, data.reason, notes=data.notes)
    return {'message': 'Scheduling canceled successfully'}


@router.post('/{scheduling_id}/start', response_model=SchedulingEnvelope)
def start_scheduling(
    scheduling_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return {'scheduling': service.start_scheduling(scheduling_id, current_user)}


@router.post('/{scheduling_id}/complete', response_model=SchedulingEnvelope)
def complete_scheduling(
    scheduling_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return {'scheduling': service.complete_scheduling(scheduling_id, current_user)}


@router.get('/{scheduling_id}/history', response_model=SchedulingHistoryEnvelope)
def get_scheduling_history(
    scheduling_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return {'history': service.get_history(scheduling_id, current_user)}
