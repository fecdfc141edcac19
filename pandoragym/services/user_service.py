import logging
import uuid

from sqlalchemy.orm import Session

from pandoragym.auth.passwords import hash_password, verify_password
from pandoragym.core.errors import ConflictError, UnauthorizedError, persistence_errors
from pandoragym.core.timeutils import utc_now
from pandoragym.database import transaction
from pandoragym.models.user import Role, User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def register(self, *, name: str, email: str, phone: str, password: str, role: Role) -> User:
        email = email.strip().lower()

        with persistence_errors(logger, 'Failed to create account', email=email, role=role.value):
            with transaction(self.db):
                if self._find_by_email(email) is not None:
                    raise ConflictError('An account with this email already exists.')

                now = utc_now()
                user = User(
                    id=uuid.uuid4(),
                    name=name.strip(),
                    email=email,
                    phone=phone.strip(),
                    hashed_password=hash_password(password),
                    role=role,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(user)

        self.db.refresh(user)
        logger.info('Created %s account %s', role.value, user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        with persistence_errors(logger, 'Failed to authenticate', email=email):
            user = self._find_by_email(email.strip().lower())

        if user is None or not verify_password(password, user.hashed_password):
            raise UnauthorizedError('Invalid credentials')
        return user

    def update_profile(
        self,
        user: User,
        *,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> User:
        with persistence_errors(logger, 'Failed to update profile', user_id=user.id):
            with transaction(self.db):
                if email is not None:
                    email = email.strip().lower()
                    existing = self._find_by_email(email)
                    if existing is not None and existing.id != user.id:
                        raise ConflictError('An account with this email already exists.')
                    user.email = email
                if name is not None:
                    user.name = name.strip()
                if phone is not None:
                    user.phone = phone.strip()
                user.updated_at = utc_now()

        self.db.refresh(user)
        return user

    def _find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()
