import pytest
from fastapi import HTTPException

from pandoragym.models.user import Role
from pandoragym.services.user_service import UserService


@pytest.fixture
def service(db) -> UserService:
    return UserService(db)


def _register(service, email='Ana@Example.com', role=Role.STUDENT):
    return service.register(name=' Ana ', email=email, phone=' 555-0101 ', password='secret123', role=role)


def test_register_normalizes_and_hashes(service) -> None:
    user = _register(service)

    assert user.email == 'ana@example.com'
    assert user.name == 'Ana'
    assert user.phone == '555-0101'
    assert user.role == Role.STUDENT
    assert user.hashed_password != 'secret123'


def test_register_duplicate_email_is_a_conflict(service) -> None:
    _register(service)

    with pytest.raises(HTTPException) as exception_info:
        _register(service, email='ana@example.com', role=Role.PERSONAL)

    assert exception_info.value.status_code == 409


def test_authenticate_accepts_valid_credentials(service) -> None:
    user = _register(service)

    assert service.authenticate(' ANA@example.com', 'secret123').id == user.id


@pytest.mark.parametrize(
    'email,password',
    [
        ('ana@example.com', 'wrong-password'),
        ('nobody@example.com', 'secret123'),
    ],
)
def test_authenticate_rejects_bad_credentials(service, email: str, password: str) -> None:
    _register(service)

    with pytest.raises(HTTPException) as exception_info:
        service.authenticate(email, password)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid credentials'


def test_update_profile_rejects_taken_email(service, make_user) -> None:
    taken = make_user(Role.PERSONAL, email='taken@example.com')
    user = _register(service)

    with pytest.raises(HTTPException) as exception_info:
        service.update_profile(user, email=taken.email)

    assert exception_info.value.status_code == 409


def test_update_profile_changes_fields(service) -> None:
    user = _register(service)

    updated = service.update_profile(user, name='Ana Maria', phone='555-0199')

    assert updated.name == 'Ana Maria'
    assert updated.phone == '555-0199'
    assert updated.email == 'ana@example.com'
