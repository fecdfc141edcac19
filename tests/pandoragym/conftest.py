import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pandoragym.auth import jwt_handler
from pandoragym.core.config import Settings
from pandoragym.database import Base
from pandoragym.main import create_app
from pandoragym.models import scheduling, workout  # noqa: F401
from pandoragym.models.user import Role, User


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url='sqlite://', jwt_secret_key='test-secret', jwt_expires_minutes=30)


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(role: Role, name: str = 'Test User', email: str | None = None,
                   hashed_password: str = 'not-a-bcrypt-hash') -> User:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email or f'{role.value.lower()}-{uuid.uuid4().hex[:8]}@example.com',
            phone='555-0100',
            hashed_password=hashed_password,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def trainer(make_user) -> User:
    return make_user(Role.PERSONAL, name='Trainer')


@pytest.fixture
def student(make_user) -> User:
    return make_user(Role.STUDENT, name='Student')


@pytest.fixture
def admin(make_user) -> User:
    return make_user(Role.ADMIN, name='Admin')


@pytest.fixture
def client(settings, engine):
    app = create_app(settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(settings):
    def _auth_headers(user: User) -> dict:
        token = jwt_handler.create_access_token(subject=str(user.id), settings=settings)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers
