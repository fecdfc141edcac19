"""Workout catalog model definitions."""

import enum
import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from pandoragym.core.timeutils import utc_now
from pandoragym.database import Base


class Level(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIARY = "INTERMEDIARY"
    ADVANCED = "ADVANCED"


class Day(str, enum.Enum):
    DOM = "Dom"
    SEG = "Seg"
    TER = "Ter"
    QUA = "Qua"
    QUI = "Qui"
    SEX = "Sex"
    SAB = "Sab"


class Workout(Base):
    """A training routine owned by a trainer, optionally assigned to a student."""
    __tablename__ = "workouts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(String, nullable=True)
    thumbnail = Column(String, nullable=False, default="")
    video_url = Column(String, nullable=True)
    rest_time_between_exercises = Column(Integer, nullable=True)
    level = Column(Enum(Level, name="level"), nullable=True)
    week_days = Column(JSON, nullable=False, default=list)
    exclusive = Column(Boolean, nullable=False, default=False)
    is_template = Column(Boolean, nullable=False, default=False)
    modality = Column(String, nullable=False, default="")
    personal_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    student_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
    deleted_at = Column(DateTime, nullable=True)

    exercises = relationship(
        "ExerciseSetup",
        back_populates="workout",
        order_by="ExerciseSetup.created_at",
        cascade="all, delete-orphan",
    )


class Exercise(Base):
    """A reusable exercise in the catalog. Rows without a trainer are shared."""
    __tablename__ = "exercises"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    thumbnail = Column(String, nullable=False, default="")
    video_url = Column(String, nullable=False, default="")
    load = Column(Integer, nullable=True)
    sets = Column(Integer, nullable=False)
    reps = Column(Integer, nullable=False)
    rest_time_between_sets = Column(Integer, nullable=False, default=0)
    personal_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)


class ExerciseSetup(Base):
    """An exercise as prescribed inside one workout."""
    __tablename__ = "exercises_setup"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    workout_id = Column(Uuid, ForeignKey("workouts.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    thumbnail = Column(String, nullable=False, default="")
    video_url = Column(String, nullable=False, default="")
    sets = Column(Integer, nullable=False)
    reps = Column(Integer, nullable=False)
    rest_time_between_sets = Column(Integer, nullable=False, default=0)
    load = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    workout = relationship("Workout", back_populates="exercises")
