import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from pandoragym.auth.dependencies import get_current_user, require_roles
from pandoragym.core.timeutils import as_utc
from pandoragym.database import get_db
from pandoragym.models.user import Role, User
from pandoragym.routes.workout_routes import (
    MAX_LOAD,
    MAX_REPS,
    MAX_REST_SECONDS,
    MAX_SETS,
    ExerciseRequest,
    MessageResponse,
)
from pandoragym.services.exercise_service import ExerciseService

router = APIRouter(tags=['exercises'])


class UpdateExerciseRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    thumbnail: str | None = None
    video_url: str | None = None
    sets: int | None = Field(default=None, ge=1, le=MAX_SETS)
    reps: int | None = Field(default=None, ge=1, le=MAX_REPS)
    rest_time_between_sets: int | None = Field(default=None, ge=0, le=MAX_REST_SECONDS)
    load: int | None = Field(default=None, ge=0, le=MAX_LOAD)


class CatalogExerciseResponse(BaseModel):
    id: uuid.UUID
    name: str
    thumbnail: str
    video_url: str
    load: int | None = None
    sets: int
    reps: int
    rest_time_between_sets: int
    personal_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator('created_at', 'updated_at')
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class CatalogExerciseEnvelope(BaseModel):
    exercise: CatalogExerciseResponse


class CatalogExerciseListEnvelope(BaseModel):
    exercises: list[CatalogExerciseResponse]


def get_exercise_service(db: Session = Depends(get_db)) -> ExerciseService:
    return ExerciseService(db)


@router.get('', response_model=CatalogExerciseListEnvelope)
def list_exercises(
    current_user: User = Depends(get_current_user),
    service: ExerciseService = Depends(get_exercise_service),
):
    return {'exercises': service.list_exercises(current_user)}


@router.post('', response_model=CatalogExerciseEnvelope, status_code=status.HTTP_201_CREATED)
def create_exercise(
    data: ExerciseRequest,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: ExerciseService = Depends(get_exercise_service),
):
    return {'exercise': service.create_exercise(current_user, data.to_input())}


@router.get('/{exercise_id}', response_model=CatalogExerciseEnvelope)
def get_exercise(
    exercise_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ExerciseService = Depends(get_exercise_service),
):
    return {'exercise': service.get_exercise(exercise_id, current_user)}


@router.put('/{exercise_id}', response_model=CatalogExerciseEnvelope)
def update_exercise(
    exercise_id: uuid.UUID,
    data: UpdateExerciseRequest,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: ExerciseService = Depends(get_exercise_service),
):
    # load is the only nullable column; the rest ignore explicit nulls.
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field == 'load'
    }
    return {'exercise': service.update_exercise(exercise_id, current_user, changes)}


@router.delete('/{exercise_id}', response_model=MessageResponse)
def delete_exercise(
    exercise_id: uuid.UUID,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: ExerciseService = Depends(get_exercise_service),
):
    service.delete_exercise(exercise_id, current_user)
    return {'message': 'Exercise deleted successfully'}
