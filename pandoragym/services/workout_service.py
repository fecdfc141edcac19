"""Workout catalog.

Trainers own workouts; students see the workouts assigned to them plus the
shared, non-exclusive templates; admins see everything that is not deleted.
Deleting a workout only stamps ``deleted_at``.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from pandoragym.core.errors import BadRequestError, ForbiddenError, NotFoundError, persistence_errors
from pandoragym.core.timeutils import utc_now
from pandoragym.database import transaction
from pandoragym.models.user import Role, User
from pandoragym.models.workout import Day, Exercise, ExerciseSetup, Level, Workout

logger = logging.getLogger(__name__)

WORKOUT_NOT_FOUND = 'Workout not found.'


@dataclass
class ExerciseInput:
    name: str
    sets: int
    reps: int
    thumbnail: str = ''
    video_url: str = ''
    rest_time_between_sets: int = 0
    load: int = 0


@dataclass
class WorkoutInput:
    name: str
    description: str | None = None
    thumbnail: str = ''
    video_url: str | None = None
    rest_time_between_exercises: int | None = None
    level: Level | None = None
    week_days: list[Day] | None = None
    exclusive: bool = False
    is_template: bool = False
    modality: str = ''
    student_id: uuid.UUID | None = None


class WorkoutService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_workouts(self, user: User) -> list[Workout]:
        with persistence_errors(logger, 'Failed to get workouts', user_id=user.id):
            return self._visible_query(user).order_by(Workout.created_at.desc()).all()

    def get_workout(self, workout_id: uuid.UUID, user: User) -> Workout:
        with persistence_errors(logger, 'Failed to get workout', workout_id=workout_id):
            workout = self._visible_query(user).filter(Workout.id == workout_id).first()
        if workout is None:
            raise NotFoundError(WORKOUT_NOT_FOUND)
        return workout

    def create_workout(self, user: User, draft: WorkoutInput, exercises: list[ExerciseInput]) -> Workout:
        if user.role != Role.PERSONAL:
            raise ForbiddenError('Only personal trainers can create workouts.')

        with persistence_errors(logger, 'Failed to create workout', user_id=user.id):
            with transaction(self.db):
                if draft.student_id is not None:
                    self._require_student(draft.student_id)

                now = utc_now()
                workout = Workout(
                    id=uuid.uuid4(),
                    name=draft.name,
                    description=draft.description,
                    thumbnail=draft.thumbnail,
                    video_url=draft.video_url,
                    rest_time_between_exercises=draft.rest_time_between_exercises,
                    level=draft.level,
                    week_days=[day.value for day in draft.week_days or []],
                    exclusive=draft.exclusive,
                    is_template=draft.is_template,
                    modality=draft.modality,
                    personal_id=user.id,
                    student_id=draft.student_id,
                    created_at=now,
                    updated_at=now,
                )
                for exercise in exercises:
                    workout.exercises.append(self._build_exercise(exercise))
                self.db.add(workout)

        self.db.refresh(workout)
        logger.info('Workout %s created by %s with %d exercises', workout.id, user.id, len(exercises))
        return workout

    def update_workout(self, workout_id: uuid.UUID, user: User, changes: dict) -> Workout:
        with persistence_errors(logger, 'Failed to update workout', workout_id=workout_id):
            with transaction(self.db):
                workout = self._get_owned(workout_id, user)

                if changes.get('student_id') is not None:
                    self._require_student(changes['student_id'])
                if 'week_days' in changes:
                    changes['week_days'] = [Day(day).value for day in changes['week_days'] or []]

                for field, value in changes.items():
                    setattr(workout, field, value)
                workout.updated_at = utc_now()

        self.db.refresh(workout)
        return workout

    def delete_workout(self, workout_id: uuid.UUID, user: User) -> None:
        with persistence_errors(logger, 'Failed to delete workout', workout_id=workout_id):
            with transaction(self.db):
                workout = self._get_owned(workout_id, user)
                workout.deleted_at = utc_now()

        logger.info('Workout %s deleted by %s', workout_id, user.id)

    def add_exercise(
        self,
        workout_id: uuid.UUID,
        user: User,
        exercise_id: uuid.UUID,
        *,
        sets: int,
        reps: int,
        rest_time_between_sets: int | None = None,
        load: int | None = None,
    ) -> ExerciseSetup:
        """Copy a catalog exercise into the workout with its own prescription.

        Rest time and load fall back to the catalog values when not given.
        """
        with persistence_errors(logger, 'Failed to add exercise', workout_id=workout_id, exercise_id=exercise_id):
            with transaction(self.db):
                workout = self._get_owned(workout_id, user)
                template = self._require_catalog_exercise(exercise_id, user)
                if rest_time_between_sets is None:
                    rest_time_between_sets = template.rest_time_between_sets
                if load is None:
                    load = template.load or 0

                setup = self._build_exercise(ExerciseInput(
                    name=template.name,
                    thumbnail=template.thumbnail,
                    video_url=template.video_url,
                    sets=sets,
                    reps=reps,
                    rest_time_between_sets=rest_time_between_sets,
                    load=load,
                ))
                workout.exercises.append(setup)
                workout.updated_at = utc_now()

        self.db.refresh(setup)
        logger.info('Exercise %s added to workout %s as %s', exercise_id, workout_id, setup.id)
        return setup

    def remove_exercise(self, workout_id: uuid.UUID, exercise_id: uuid.UUID, user: User) -> None:
        with persistence_errors(logger, 'Failed to remove exercise', workout_id=workout_id, exercise_id=exercise_id):
            with transaction(self.db):
                workout = self._get_owned(workout_id, user)
                setup = next((item for item in workout.exercises if item.id == exercise_id), None)
                if setup is None:
                    raise NotFoundError('Exercise not found.')
                workout.exercises.remove(setup)
                workout.updated_at = utc_now()

    def _visible_query(self, user: User) -> Query:
        query = self.db.query(Workout).filter(Workout.deleted_at.is_(None))

        if user.role == Role.PERSONAL:
            return query.filter(Workout.personal_id == user.id)
        if user.role == Role.STUDENT:
            return query.filter(or_(
                Workout.student_id == user.id,
                Workout.is_template.is_(True) & Workout.exclusive.is_(False),
            ))
        if user.role == Role.ADMIN:
            return query
        raise ForbiddenError('Unknown role.')

    def _get_owned(self, workout_id: uuid.UUID, user: User) -> Workout:
        workout = self.db.get(Workout, workout_id)
        if workout is None or workout.deleted_at is not None:
            raise NotFoundError(WORKOUT_NOT_FOUND)
        if workout.personal_id != user.id:
            raise ForbiddenError('Only the trainer who owns this workout can change it.')
        return workout

    def _require_student(self, student_id: uuid.UUID) -> User:
        student = self.db.get(User, student_id)
        if student is None or student.role != Role.STUDENT:
            raise BadRequestError('student_id does not belong to a student.')
        return student

    def _require_catalog_exercise(self, exercise_id: uuid.UUID, user: User) -> Exercise:
        exercise = self.db.get(Exercise, exercise_id)
        if exercise is None or exercise.personal_id not in (None, user.id):
            raise NotFoundError('Exercise not found.')
        return exercise

    @staticmethod
    def _build_exercise(exercise: ExerciseInput) -> ExerciseSetup:
        now = utc_now()
        return ExerciseSetup(
            id=uuid.uuid4(),
            name=exercise.name,
            thumbnail=exercise.thumbnail,
            video_url=exercise.video_url,
            sets=exercise.sets,
            reps=exercise.reps,
            rest_time_between_sets=exercise.rest_time_between_sets,
            load=exercise.load,
            created_at=now,
            updated_at=now,
        )
