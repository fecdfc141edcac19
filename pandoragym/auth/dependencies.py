import uuid
from collections.abc import Callable

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pandoragym.auth import jwt_handler
from pandoragym.core.config import Settings
from pandoragym.core.errors import ForbiddenError, UnauthorizedError
from pandoragym.database import get_db
from pandoragym.models.user import Role, User

security = HTTPBearer(auto_error=False)

ROLE_LABELS = {
    Role.STUDENT: "Student",
    Role.PERSONAL: "Personal trainer",
    Role.ADMIN: "Admin",
}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None:
        raise UnauthorizedError("Authorization header required")

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials, settings)
    except jwt.PyJWTError as exc:
        raise UnauthorizedError("Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token subject")

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError as exc:
        raise UnauthorizedError("Invalid token subject") from exc

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def require_roles(*roles: Role) -> Callable[..., User]:
    allowed = frozenset(roles)
    label = " or ".join(ROLE_LABELS[role] for role in roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise ForbiddenError(f"Access denied: {label} role required")
        return current_user

    return dependency
