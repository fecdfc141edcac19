import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from pandoragym.auth.dependencies import get_current_user, require_roles
from pandoragym.core.timeutils import as_utc
from pandoragym.database import get_db
from pandoragym.models.user import Role, User
from pandoragym.models.workout import Day, Level
from pandoragym.services.workout_service import ExerciseInput, WorkoutService, WorkoutInput

router = APIRouter(tags=['workouts'])

MAX_SETS = 50
MAX_REPS = 500
MAX_LOAD = 1000
MAX_REST_SECONDS = 3600
CLEARABLE_WORKOUT_FIELDS = frozenset({
    'description',
    'video_url',
    'rest_time_between_exercises',
    'level',
    'student_id',
})


class ExerciseRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    thumbnail: str = ''
    video_url: str = ''
    sets: int = Field(ge=1, le=MAX_SETS)
    reps: int = Field(ge=1, le=MAX_REPS)
    rest_time_between_sets: int = Field(default=0, ge=0, le=MAX_REST_SECONDS)
    load: int = Field(default=0, ge=0, le=MAX_LOAD)

    def to_input(self) -> ExerciseInput:
        return ExerciseInput(**self.model_dump())


class AddExerciseRequest(BaseModel):
    exercise_id: uuid.UUID
    sets: int = Field(ge=1, le=MAX_SETS)
    reps: int = Field(ge=1, le=MAX_REPS)
    rest_time_between_sets: int | None = Field(default=None, ge=0, le=MAX_REST_SECONDS)
    load: int | None = Field(default=None, ge=0, le=MAX_LOAD)


class CreateWorkoutRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = None
    thumbnail: str = ''
    video_url: str | None = None
    rest_time_between_exercises: int | None = Field(default=None, ge=0, le=MAX_REST_SECONDS)
    level: Level | None = None
    week_days: list[Day] = Field(default_factory=list)
    exclusive: bool = False
    is_template: bool = False
    modality: str = ''
    student_id: uuid.UUID | None = None
    exercises: list[ExerciseRequest] = Field(default_factory=list)

    @field_validator('week_days')
    @classmethod
    def dedupe_week_days(cls, value: list[Day]) -> list[Day]:
        return list(dict.fromkeys(value))


class UpdateWorkoutRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = None
    thumbnail: str | None = None
    video_url: str | None = None
    rest_time_between_exercises: int | None = Field(default=None, ge=0, le=MAX_REST_SECONDS)
    level: Level | None = None
    week_days: list[Day] | None = None
    exclusive: bool | None = None
    is_template: bool | None = None
    modality: str | None = None
    student_id: uuid.UUID | None = None


class ExerciseResponse(BaseModel):
    id: uuid.UUID
    workout_id: uuid.UUID
    name: str
    thumbnail: str
    video_url: str
    sets: int
    reps: int
    rest_time_between_sets: int
    load: int

    class Config:
        from_attributes = True


class WorkoutResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    thumbnail: str
    video_url: str | None = None
    rest_time_between_exercises: int | None = None
    level: Level | None = None
    week_days: list[Day]
    exclusive: bool
    is_template: bool
    modality: str
    personal_id: uuid.UUID | None = None
    student_id: uuid.UUID | None = None
    exercises: list[ExerciseResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator('created_at', 'updated_at')
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class WorkoutEnvelope(BaseModel):
    workout: WorkoutResponse


class WorkoutListEnvelope(BaseModel):
    workouts: list[WorkoutResponse]


class ExerciseEnvelope(BaseModel):
    exercise: ExerciseResponse


class MessageResponse(BaseModel):
    message: str


def get_workout_service(db: Session = Depends(get_db)) -> WorkoutService:
    return WorkoutService(db)


@router.get('', response_model=WorkoutListEnvelope)
def list_workouts(
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    return {'workouts': service.list_workouts(current_user)}


@router.post('', response_model=WorkoutEnvelope, status_code=status.HTTP_201_CREATED)
def create_workout(
    data: CreateWorkoutRequest,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: WorkoutService = Depends(get_workout_service),
):
    draft = WorkoutInput(**data.model_dump(exclude={'exercises'}))
    exercises = [exercise.to_input() for exercise in data.exercises]
    return {'workout': service.create_workout(current_user, draft, exercises)}


@router.get('/{workout_id}', response_model=WorkoutEnvelope)
def get_workout(
    workout_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    return {'workout': service.get_workout(workout_id, current_user)}


@router.put('/{workout_id}', response_model=WorkoutEnvelope)
def update_workout(
    workout_id: uuid.UUID,
    data: UpdateWorkoutRequest,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: WorkoutService = Depends(get_workout_service),
):
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in CLEARABLE_WORKOUT_FIELDS
    }
    return {'workout': service.update_workout(workout_id, current_user, changes)}


@router.delete('/{workout_id}', response_model=MessageResponse)
def delete_workout(
    workout_id: uuid.UUID,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: WorkoutService = Depends(get_workout_service),
):
    service.delete_workout(workout_id, current_user)
    return {'message': 'Workout deleted successfully'}


@router.post('/{workout_id}/exercises', response_model=ExerciseEnvelope, status_code=status.HTTP_201_CREATED)
def add_exercise(
    workout_id: uuid.UUID,
    data: AddExerciseRequest,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: WorkoutService = Depends(get_workout_service),
):
    setup = service.add_exercise(
        workout_id,
        current_user,
        data.exercise_id,
        sets=data.sets,
        reps=data.reps,
        rest_time_between_sets=data.rest_time_between_sets,
        load=data.load,
    )
    return {'exercise': setup}


@router.delete('/{workout_id}/exercises/{exercise_id}', response_model=MessageResponse)
def remove_exercise(
    workout_id: uuid.UUID,
    exercise_id: uuid.UUID,
    current_user: User = Depends(require_roles(Role.PERSONAL)),
    service: WorkoutService = Depends(get_workout_service),
):
    service.remove_exercise(workout_id, exercise_id, current_user)
    return {'message': 'Exercise removed successfully'}
