"""Exercise catalog.

Trainers keep their own exercises; rows without a trainer form a shared
library every trainer can pick from. Students and admins browse the whole
catalog. Only the owning trainer may change or delete an exercise, and
deleting one leaves the copies already placed in workouts untouched.
"""

import logging
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from pandoragym.core.errors import ForbiddenError, NotFoundError, persistence_errors
from pandoragym.core.timeutils import utc_now
from pandoragym.database import transaction
from pandoragym.models.user import Role, User
from pandoragym.models.workout import Exercise
from pandoragym.services.workout_service import ExerciseInput

logger = logging.getLogger(__name__)

EXERCISE_NOT_FOUND = 'Exercise not found.'


class ExerciseService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_exercises(self, user: User) -> list[Exercise]:
        with persistence_errors(logger, 'Failed to get exercises', user_id=user.id):
            return self._visible_query(user).order_by(Exercise.name.asc()).all()

    def get_exercise(self, exercise_id: uuid.UUID, user: User) -> Exercise:
        with persistence_errors(logger, 'Failed to get exercise', exercise_id=exercise_id):
            exercise = self._visible_query(user).filter(Exercise.id == exercise_id).first()
        if exercise is None:
            raise NotFoundError(EXERCISE_NOT_FOUND)
        return exercise

    def create_exercise(self, user: User, draft: ExerciseInput) -> Exercise:
        if user.role != Role.PERSONAL:
            raise ForbiddenError('Only personal trainers can create exercises.')

        with persistence_errors(logger, 'Failed to create exercise', user_id=user.id):
            with transaction(self.db):
                now = utc_now()
                exercise = Exercise(
                    id=uuid.uuid4(),
                    name=draft.name,
                    thumbnail=draft.thumbnail,
                    video_url=draft.video_url,
                    load=draft.load,
                    sets=draft.sets,
                    reps=draft.reps,
                    rest_time_between_sets=draft.rest_time_between_sets,
                    personal_id=user.id,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(exercise)

        self.db.refresh(exercise)
        logger.info('Exercise %s created by %s', exercise.id, user.id)
        return exercise

    def update_exercise(self, exercise_id: uuid.UUID, user: User, changes: dict) -> Exercise:
        with persistence_errors(logger, 'Failed to update exercise', exercise_id=exercise_id):
            with transaction(self.db):
                exercise = self._get_owned(exercise_id, user)
                for field, value in changes.items():
                    setattr(exercise, field, value)
                exercise.updated_at = utc_now()

        self.db.refresh(exercise)
        return exercise

    def delete_exercise(self, exercise_id: uuid.UUID, user: User) -> None:
        with persistence_errors(logger, 'Failed to delete exercise', exercise_id=exercise_id):
            with transaction(self.db):
                exercise = self._get_owned(exercise_id, user)
                self.db.delete(exercise)

        logger.info('Exercise %s deleted by %s', exercise_id, user.id)

    def _visible_query(self, user: User) -> Query:
        query = self.db.query(Exercise)
        if user.role == Role.PERSONAL:
            return query.filter(or_(Exercise.personal_id == user.id, Exercise.personal_id.is_(None)))
        return query

    def _get_owned(self, exercise_id: uuid.UUID, user: User) -> Exercise:
        exercise = self.db.get(Exercise, exercise_id)
        # Another trainer's private exercise is invisible, not forbidden.
        if exercise is None or exercise.personal_id not in (None, user.id):
            raise NotFoundError(EXERCISE_NOT_FOUND)
        if exercise.personal_id != user.id:
            raise ForbiddenError('Only the trainer who owns this exercise can change it.')
        return exercise
