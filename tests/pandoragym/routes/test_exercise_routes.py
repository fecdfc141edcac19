import pytest

from pandoragym.models.user import Role

EXERCISE_PAYLOAD = {'name': 'Deadlift', 'sets': 5, 'reps': 5, 'load': 120, 'rest_time_between_sets': 180}


@pytest.fixture
def catalog_exercise(client, auth_headers, trainer) -> dict:
    response = client.post('/api/exercises', json=EXERCISE_PAYLOAD, headers=auth_headers(trainer))
    assert response.status_code == 201
    return response.json()['exercise']


def test_create_exercise(catalog_exercise, trainer) -> None:
    assert catalog_exercise['personal_id'] == str(trainer.id)
    assert catalog_exercise['load'] == 120


def test_students_browse_but_cannot_create(client, auth_headers, catalog_exercise, student) -> None:
    headers = auth_headers(student)

    listed = client.get('/api/exercises', headers=headers)
    assert listed.status_code == 200
    assert [item['id'] for item in listed.json()['exercises']] == [catalog_exercise['id']]

    created = client.post('/api/exercises', json=EXERCISE_PAYLOAD, headers=headers)
    assert created.status_code == 403


def test_exercise_bounds_are_enforced(client, auth_headers, trainer) -> None:
    response = client.post('/api/exercises', json={**EXERCISE_PAYLOAD, 'reps': 0}, headers=auth_headers(trainer))

    assert response.status_code == 400
    assert response.json()['message'].startswith('reps: ')


def test_update_and_delete_by_owner(client, auth_headers, catalog_exercise, trainer) -> None:
    headers = auth_headers(trainer)
    url = f"/api/exercises/{catalog_exercise['id']}"

    updated = client.put(url, json={'reps': 3, 'name': None}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()['exercise']['reps'] == 3
    assert updated.json()['exercise']['name'] == 'Deadlift'

    deleted = client.delete(url, headers=headers)
    assert deleted.json() == {'message': 'Exercise deleted successfully'}
    assert client.get(url, headers=headers).status_code == 404


def test_other_trainer_cannot_see_or_change(client, auth_headers, catalog_exercise, make_user) -> None:
    headers = auth_headers(make_user(Role.PERSONAL))
    url = f"/api/exercises/{catalog_exercise['id']}"

    assert client.get(url, headers=headers).status_code == 404
    assert client.put(url, json={'reps': 3}, headers=headers).status_code == 404
    assert client.delete(url, headers=headers).status_code == 404
