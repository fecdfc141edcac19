"""User model definitions."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, String, Uuid

from pandoragym.core.timeutils import utc_now
from pandoragym.database import Base


class Role(str, enum.Enum):
    STUDENT = "STUDENT"
    PERSONAL = "PERSONAL"
    ADMIN = "ADMIN"


class User(Base):
    """Represents an account: a student, a personal trainer or an admin."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=False, default="")
    avatar_url = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, name="role"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
