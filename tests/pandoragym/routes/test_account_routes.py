import pytest

STUDENT_PAYLOAD = {
    'name': 'Ana Souza',
    'email': 'ana@example.com',
    'phone': '555-0101',
    'password': 'secret123',
}


def _login(client, email='ana@example.com', password='secret123'):
    return client.post('/auth/session', json={'email': email, 'password': password})


@pytest.mark.parametrize('path,role', [('student', 'STUDENT'), ('personal', 'PERSONAL')])
def test_register_assigns_role(client, path: str, role: str) -> None:
    response = client.post(f'/auth/register/{path}', json=STUDENT_PAYLOAD)

    assert response.status_code == 201
    user = response.json()['user']
    assert user['role'] == role
    assert user['email'] == 'ana@example.com'
    assert 'hashed_password' not in user


def test_register_duplicate_email_conflicts(client) -> None:
    client.post('/auth/register/student', json=STUDENT_PAYLOAD)

    response = client.post('/auth/register/personal', json=STUDENT_PAYLOAD)

    assert response.status_code == 409
    assert response.json()['error'] == 'Conflict'


def test_register_short_password_is_rejected(client) -> None:
    response = client.post('/auth/register/student', json={**STUDENT_PAYLOAD, 'password': '123'})

    assert response.status_code == 400
    assert response.json()['message'].startswith('password: ')


def test_register_password_over_72_bytes_is_rejected(client) -> None:
    response = client.post('/auth/register/student', json={**STUDENT_PAYLOAD, 'password': 'é' * 40})

    assert response.status_code == 400
    assert response.json() == {
        'error': 'Bad Request',
        'message': 'password: must be at most 72 bytes when UTF-8 encoded',
    }


def test_register_multibyte_password_within_72_bytes(client) -> None:
    password = 'é' * 36
    client.post('/auth/register/student', json={**STUDENT_PAYLOAD, 'password': password})

    response = _login(client, password=password)

    assert response.status_code == 200


def test_session_returns_token_usable_for_profile(client, settings) -> None:
    client.post('/auth/register/student', json=STUDENT_PAYLOAD)

    response = _login(client)

    assert response.status_code == 200
    body = response.json()
    assert body['token_type'] == 'bearer'
    assert body['expires_in'] == settings.jwt_expires_minutes * 60
    assert body['user']['email'] == 'ana@example.com'

    profile = client.get('/api/users/profile', headers={'Authorization': f"Bearer {body['token']}"})
    assert profile.status_code == 200
    assert profile.json()['user']['id'] == body['user']['id']


def test_session_with_wrong_password_is_unauthorized(client) -> None:
    client.post('/auth/register/student', json=STUDENT_PAYLOAD)

    response = _login(client, password='wrong-password')

    assert response.status_code == 401
    assert response.json() == {'error': 'Unauthorized', 'message': 'Invalid credentials'}


def test_update_profile(client, auth_headers, student) -> None:
    response = client.put(
        '/api/users/profile',
        json={'name': 'Student Renamed', 'phone': '555-0199'},
        headers=auth_headers(student),
    )

    assert response.status_code == 200
    user = response.json()['user']
    assert user['name'] == 'Student Renamed'
    assert user['phone'] == '555-0199'


@pytest.mark.parametrize('payload', [{'name': '  a  '}, {'phone': '   '}])
def test_update_profile_checks_bounds_after_trimming(client, auth_headers, student, payload) -> None:
    headers = auth_headers(student)

    response = client.put('/api/users/profile', json=payload, headers=headers)

    assert response.status_code == 400
    field = next(iter(payload))
    assert response.json()['message'].startswith(f'{field}: ')
    profile = client.get('/api/users/profile', headers=headers).json()['user']
    assert profile['name'] == 'Student'
    assert profile['phone'] == '555-0100'


def test_invalid_token_is_unauthorized(client) -> None:
    response = client.get('/api/users/profile', headers={'Authorization': 'Bearer garbage'})

    assert response.status_code == 401
    assert response.json()['message'] == 'Invalid token'
