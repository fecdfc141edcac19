"""Scheduling lifecycle.

A scheduling starts in PENDING_CONFIRMATION and is only ever moved between
statuses, never deleted. Every status change appends a SchedulingHistory row
in the same transaction as the change itself, since the scheduling row is
overwritten in place and the history is the only record of why it changed.

Double booking of a trainer is not checked here.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from pandoragym.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, persistence_errors
from pandoragym.core.timeutils import to_utc_naive, utc_now
from pandoragym.database import transaction
from pandoragym.models.scheduling import Scheduling, SchedulingHistory, SchedulingStatus, SchedulingType
from pandoragym.models.user import Role, User
from pandoragym.models.workout import Workout

logger = logging.getLogger(__name__)

MIN_CANCEL_REASON_LENGTH = 5
MAX_CANCEL_REASON_LENGTH = 500

# START, COMPLETE and CANCEL have their own operations.
UPDATABLE_STATUSES = frozenset({
    SchedulingStatus.SCHEDULED,
    SchedulingStatus.RESCHEDULED,
    SchedulingStatus.MISSED,
})

SCHEDULING_NOT_FOUND = 'Scheduling not found.'


class SchedulingService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_schedulings(self, user: User) -> list[Scheduling]:
        with persistence_errors(logger, 'Failed to get schedulings', user_id=user.id):
            return self.db.query(Scheduling).filter(
                (Scheduling.personal_id == user.id) | (Scheduling.student_id == user.id)
            ).order_by(Scheduling.date.desc()).all()

    def get_scheduling(self, scheduling_id: uuid.UUID, user: User) -> Scheduling:
        with persistence_errors(logger, 'Failed to get scheduling', scheduling_id=scheduling_id, user_id=user.id):
            return self._get_visible(scheduling_id, user)

    def get_history(self, scheduling_id: uuid.UUID, user: User) -> list[SchedulingHistory]:
        with persistence_errors(logger, 'Failed to get scheduling history', scheduling_id=scheduling_id):
            scheduling = self._get_visible(scheduling_id, user)
            return self.db.query(SchedulingHistory).filter(
                SchedulingHistory.schedule_id == scheduling.id,
            ).order_by(SchedulingHistory.changed_at.asc()).all()

    def create_scheduling(
        self,
        user: User,
        *,
        personal_id: uuid.UUID,
        student_id: uuid.UUID,
        date: datetime,
        scheduling_type: SchedulingType,
        workout_id: uuid.UUID | None = None,
    ) -> Scheduling:
        if user.role == Role.PERSONAL:
            if personal_id != user.id:
                raise ForbiddenError('Personal trainers can only create their own schedulings.')
        elif user.role == Role.STUDENT:
            if student_id != user.id:
                raise ForbiddenError('Students can only create their own schedulings.')
        elif user.role == Role.ADMIN:
            raise ForbiddenError('Admins cannot create schedulings.')

        now = utc_now()
        date = to_utc_naive(date)
        if date < now:
            raise BadRequestError('Cannot schedule in the past.')

        with persistence_errors(logger, 'Failed to create scheduling', user_id=user.id):
            with transaction(self.db):
                self._require_user(personal_id, Role.PERSONAL, 'personal_id does not belong to a personal trainer.')
                self._require_user(student_id, Role.STUDENT, 'student_id does not belong to a student.')
                if workout_id is not None:
                    self._require_workout(workout_id)

                scheduling = Scheduling(
                    id=uuid.uuid4(),
                    personal_id=personal_id,
                    student_id=student_id,
                    workout_id=workout_id,
                    date=date,
                    type=scheduling_type,
                    status=SchedulingStatus.PENDING_CONFIRMATION,
                    created_at=now,
                    user_id=user.id,
                )
                self.db.add(scheduling)
                self.db.flush()
                self._record_history(scheduling, user, now)

        self.db.refresh(scheduling)
        logger.info(
            'Scheduling %s created by %s for personal %s and student %s',
            scheduling.id, user.id, personal_id, student_id,
        )
        return scheduling

    def update_scheduling(
        self,
        scheduling_id: uuid.UUID,
        user: User,
        *,
        date: datetime | None = None,
        scheduling_type: SchedulingType | None = None,
        status: SchedulingStatus | None = None,
        workout_id: uuid.UUID | None = None,
    ) -> Scheduling:
        now = utc_now()
        if date is not None:
            date = to_utc_naive(date)
            if date < now:
                raise BadRequestError('Cannot reschedule to the past.')

        if status is not None and status not in UPDATABLE_STATUSES:
            allowed = ', '.join(sorted(item.value for item in UPDATABLE_STATUSES))
            raise BadRequestError(f'status must be one of: {allowed}')

        with persistence_errors(logger, 'Failed to update scheduling', scheduling_id=scheduling_id):
            with transaction(self.db):
                scheduling = self._get_visible(scheduling_id, user)
                self._require_not_terminal(scheduling)
                if scheduling.status == SchedulingStatus.IN_PROGRESS:
                    raise ConflictError('An IN_PROGRESS scheduling can only be completed or canceled.')

                if workout_id is not None:
                    self._require_workout(workout_id)
                    scheduling.workout_id = workout_id
                if scheduling_type is not None:
                    scheduling.type = scheduling_type

                new_status = status
                if date is not None and date != scheduling.date:
                    scheduling.date = date
                    if new_status is None:
                        new_status = SchedulingStatus.RESCHEDULED

                if new_status is not None and new_status != scheduling.status:
                    scheduling.status = new_status
                    self._record_history(scheduling, user, now)

        self.db.refresh(scheduling)
        logger.info('Scheduling %s updated by %s, status %s', scheduling.id, user.id, scheduling.status.value)
        return scheduling

    def start_scheduling(self, scheduling_id: uuid.UUID, user: User) -> Scheduling:
        with persistence_errors(logger, 'Failed to start scheduling', scheduling_id=scheduling_id):
            with transaction(self.db):
                scheduling = self._get_visible(scheduling_id, user)
                self._require_not_terminal(scheduling)
                if scheduling.status == SchedulingStatus.IN_PROGRESS:
                    raise ConflictError('Scheduling is already IN_PROGRESS.')

                now = utc_now()
                scheduling.started_at = now
                scheduling.status = SchedulingStatus.IN_PROGRESS
                self._record_history(scheduling, user, now)

        self.db.refresh(scheduling)
        logger.info('Scheduling %s started by %s', scheduling.id, user.id)
        return scheduling

    def complete_scheduling(self, scheduling_id: uuid.UUID, user: User) -> Scheduling:
        with persistence_errors(logger, 'Failed to complete scheduling', scheduling_id=scheduling_id):
            with transaction(self.db):
                scheduling = self._get_visible(scheduling_id, user)
                self._require_not_terminal(scheduling)

                now = utc_now()
                scheduling.completed_at = now
                scheduling.status = SchedulingStatus.COMPLETED
                self._record_history(scheduling, user, now)

        self.db.refresh(scheduling)
        logger.info('Scheduling %s completed by %s', scheduling.id, user.id)
        return scheduling

    def cancel_scheduling(
        self,
        scheduling_id: uuid.UUID,
        user: User,
        reason: str,
        notes: str | None = None,
    ) -> Scheduling:
        reason = (reason or '').strip()
        if not MIN_CANCEL_REASON_LENGTH <= len(reason) <= MAX_CANCEL_REASON_LENGTH:
            raise BadRequestError(
                f'reason must be between {MIN_CANCEL_REASON_LENGTH} and {MAX_CANCEL_REASON_LENGTH} characters.'
            )

        with persistence_errors(logger, 'Failed to cancel scheduling', scheduling_id=scheduling_id):
            with transaction(self.db):
                scheduling = self._get_visible(scheduling_id, user)
                self._require_not_terminal(scheduling)

                scheduling.status = SchedulingStatus.CANCELED
                self._record_history(scheduling, user, utc_now(), reason=reason, notes=notes)

        self.db.refresh(scheduling)
        logger.info('Scheduling %s canceled by %s', scheduling.id, user.id)
        return scheduling

    def _get_visible(self, scheduling_id: uuid.UUID, user: User) -> Scheduling:
        scheduling = self.db.get(Scheduling, scheduling_id)
        # Non-participants get the same answer as a missing id.
        if scheduling is None or not scheduling.has_participant(user.id):
            raise NotFoundError(SCHEDULING_NOT_FOUND)
        return scheduling

    def _require_not_terminal(self, scheduling: Scheduling) -> None:
        if scheduling.status.is_terminal:
            raise ConflictError(f'Scheduling is already {scheduling.status.value}.')

    def _require_user(self, user_id: uuid.UUID, role: Role, detail: str) -> User:
        user = self.db.get(User, user_id)
        if user is None or user.role != role:
            raise BadRequestError(detail)
        return user

    def _require_workout(self, workout_id: uuid.UUID) -> Workout:
        workout = self.db.get(Workout, workout_id)
        if workout is None or workout.deleted_at is not None:
            raise BadRequestError('workout_id does not reference an existing workout.')
        return workout

    def _record_history(
        self,
        scheduling: Scheduling,
        actor: User,
        changed_at: datetime,
        reason: str | None = None,
        notes: str | None = None,
    ) -> SchedulingHistory:
        entry = SchedulingHistory(
            id=uuid.uuid4(),
            schedule_id=scheduling.id,
            user_id=actor.id,
            status=scheduling.status,
            changed_at=changed_at,
            changed_by=actor.role.value,
            reason=reason,
            notes=notes,
        )
        self.db.add(entry)
        return entry
