"""Scheduling model definitions."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, String, Uuid

from pandoragym.core.timeutils import utc_now
from pandoragym.database import Base


class SchedulingStatus(str, enum.Enum):
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    RESCHEDULED = "RESCHEDULED"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"
    MISSED = "MISSED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    SchedulingStatus.COMPLETED,
    SchedulingStatus.CANCELED,
    SchedulingStatus.MISSED,
})


class SchedulingType(str, enum.Enum):
    ONLINE = "ONLINE"
    IN_PERSON = "IN_PERSON"


class Scheduling(Base):
    """A booked session between a personal trainer and a student."""
    __tablename__ = "scheduling"
    __table_args__ = (
        Index("idx_scheduling_personal_date", "personal_id", "date"),
        Index("idx_scheduling_student_date", "student_id", "date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    personal_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    student_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    workout_id = Column(Uuid, ForeignKey("workouts.id"), nullable=True)
    date = Column(DateTime, nullable=False)
    type = Column(Enum(SchedulingType, name="scheduling_type"), nullable=False)
    status = Column(Enum(SchedulingStatus, name="scheduling_status"), nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)

    def has_participant(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.personal_id, self.student_id)


class SchedulingHistory(Base):
    """Append-only audit record of one scheduling status change."""
    __tablename__ = "schedulings_history"
    __table_args__ = (
        Index("idx_schedulings_history_schedule", "schedule_id", "changed_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    schedule_id = Column(Uuid, ForeignKey("scheduling.id"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(SchedulingStatus, name="scheduling_status"), nullable=False)
    changed_at = Column(DateTime, nullable=False, default=utc_now)
    changed_by = Column(String, nullable=False)
    reason = Column(String(500), nullable=True)
    notes = Column(String, nullable=True)
