from datetime import datetime, timedelta, timezone

import pytest

from pandoragym.models.user import Role


def _future(hours: int = 24) -> str:
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).replace(microsecond=0).isoformat()


@pytest.fixture
def booking(client, auth_headers, trainer, student) -> dict:
    response = client.post(
        '/api/schedulings',
        json={
            'personal_id': str(trainer.id),
            'student_id': str(student.id),
            'date': _future(),
            'type': 'IN_PERSON',
            'status': 'COMPLETED',
        },
        headers=auth_headers(trainer),
    )
    assert response.status_code == 201
    return response.json()['scheduling']


def test_requests_without_token_are_unauthorized(client) -> None:
    response = client.get('/api/schedulings')

    assert response.status_code == 401
    assert response.json() == {'error': 'Unauthorized', 'message': 'Authorization header required'}


def test_create_ignores_submitted_status(booking, trainer, student) -> None:
    assert booking['status'] == 'PENDING_CONFIRMATION'
    assert booking['personal_id'] == str(trainer.id)
    assert booking['student_id'] == str(student.id)
    assert booking['type'] == 'IN_PERSON'
    assert booking['date'].endswith('Z') or booking['date'].endswith('+00:00')


def test_created_scheduling_reads_back_unchanged(client, auth_headers, booking, student) -> None:
    response = client.get(f"/api/schedulings/{booking['id']}", headers=auth_headers(student))

    assert response.status_code == 200
    fetched = response.json()['scheduling']
    assert fetched['id'] == booking['id']
    assert fetched['date'] == booking['date']
    assert fetched['type'] == booking['type']


def test_list_returns_envelope(client, auth_headers, booking, trainer) -> None:
    response = client.get('/api/schedulings', headers=auth_headers(trainer))

    assert response.status_code == 200
    assert [item['id'] for item in response.json()['schedulings']] == [booking['id']]


def test_create_in_the_past_is_rejected(client, auth_headers, trainer, student) -> None:
    response = client.post(
        '/api/schedulings',
        json={
            'personal_id': str(trainer.id),
            'student_id': str(student.id),
            'date': _future(hours=-2),
            'type': 'ONLINE',
        },
        headers=auth_headers(trainer),
    )

    assert response.status_code == 400
    assert response.json() == {'error': 'Bad Request', 'message': 'Cannot schedule in the past.'}
    assert client.get('/api/schedulings', headers=auth_headers(trainer)).json() == {'schedulings': []}


def test_create_with_unknown_type_is_a_validation_error(client, auth_headers, trainer, student) -> None:
    response = client.post(
        '/api/schedulings',
        json={
            'personal_id': str(trainer.id),
            'student_id': str(student.id),
            'date': _future(),
            'type': 'HYBRID',
        },
        headers=auth_headers(trainer),
    )

    assert response.status_code == 400
    assert response.json()['message'].startswith('type: ')


def test_outsider_gets_not_found(client, auth_headers, booking, make_user) -> None:
    outsider = make_user(Role.STUDENT)

    response = client.get(f"/api/schedulings/{booking['id']}", headers=auth_headers(outsider))

    assert response.status_code == 404
    assert response.json() == {'error': 'Not Found', 'message': 'Scheduling not found.'}


def test_malformed_id_is_rejected(client, auth_headers, trainer) -> None:
    response = client.get('/api/schedulings/not-a-uuid', headers=auth_headers(trainer))

    assert response.status_code == 400


def test_update_reschedules(client, auth_headers, booking, trainer) -> None:
    headers = auth_headers(trainer)

    response = client.put(
        f"/api/schedulings/{booking['id']}",
        json={'date': _future(hours=72), 'type': 'ONLINE'},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json() == {'message': 'Scheduling updated successfully'}
    fetched = client.get(f"/api/schedulings/{booking['id']}", headers=headers).json()['scheduling']
    assert fetched['status'] == 'RESCHEDULED'
    assert fetched['type'] == 'ONLINE'


def test_update_to_the_past_keeps_record(client, auth_headers, booking, trainer) -> None:
    headers = auth_headers(trainer)

    response = client.put(
        f"/api/schedulings/{booking['id']}",
        json={'date': _future(hours=-1)},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()['message'] == 'Cannot reschedule to the past.'
    fetched = client.get(f"/api/schedulings/{booking['id']}", headers=headers).json()['scheduling']
    assert fetched['date'] == booking['date']
    assert fetched['status'] == 'PENDING_CONFIRMATION'


def test_cancel_flow_and_history(client, auth_headers, booking, student) -> None:
    headers = auth_headers(student)
    url = f"/api/schedulings/{booking['id']}"

    too_short = client.request('DELETE', url, json={'reason': ' no '}, headers=headers)
    assert too_short.status_code == 400
    assert too_short.json()['message'].startswith('reason: ')

    canceled = client.request('DELETE', url, json={'reason': 'Feeling unwell today'}, headers=headers)
    assert canceled.status_code == 200
    assert canceled.json() == {'message': 'Scheduling canceled successfully'}

    again = client.request('DELETE', url, json={'reason': 'Feeling unwell today'}, headers=headers)
    assert again.status_code == 409
    assert again.json() == {'error': 'Conflict', 'message': 'Scheduling is already CANCELED.'}

    history = client.get(f'{url}/history', headers=headers).json()['history']
    assert [entry['status'] for entry in history] == ['PENDING_CONFIRMATION', 'CANCELED']
    assert history[-1]['reason'] == 'Feeling unwell today'
    assert history[-1]['changed_by'] == 'STUDENT'


def test_start_and_complete(client, auth_headers, booking, trainer) -> None:
    headers = auth_headers(trainer)
    url = f"/api/schedulings/{booking['id']}"

    started = client.post(f'{url}/start', headers=headers)
    assert started.status_code == 200
    assert started.json()['scheduling']['status'] == 'IN_PROGRESS'
    assert started.json()['scheduling']['started_at'] is not None

    completed = client.post(f'{url}/complete', headers=headers)
    assert completed.status_code == 200
    assert completed.json()['scheduling']['status'] == 'COMPLETED'

    assert client.post(f'{url}/start', headers=headers).status_code == 409


def test_admin_cannot_book(client, auth_headers, admin, trainer, student) -> None:
    response = client.post(
        '/api/schedulings',
        json={
            'personal_id': str(trainer.id),
            'student_id': str(student.id),
            'date': _future(),
            'type': 'ONLINE',
        },
        headers=auth_headers(admin),
    )

    assert response.status_code == 403
