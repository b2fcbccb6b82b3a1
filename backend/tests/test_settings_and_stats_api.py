from fastapi.testclient import TestClient
from sqlmodel import Session, select
from study_tracker.main import app
from study_tracker.database import engine
from study_tracker import models

client = TestClient(app)


def h(user_id):
    return {'user-id': user_id}


def count_rows(model, user_id):
    with Session(engine) as session:
        return len(session.exec(select(model).where(model.userId == user_id)).all())


def test_settings_first_read_creates_empty_record(user_id):
    first = client.get('/api/settings', headers=h(user_id))
    second = client.get('/api/settings', headers=h(user_id))
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert first.json()['userId'] == user_id
    assert first.json()['darkMode'] is None
    assert count_rows(models.UserSettings, user_id) == 1


def test_settings_upsert_creates_then_updates_in_place(user_id):
    created = client.put('/api/settings', json={'darkMode': True, 'pomodoroLength': 25}, headers=h(user_id))
    assert created.status_code == 200
    assert created.json()['darkMode'] is True
    assert created.json()['pomodoroLength'] == 25

    updated = client.put('/api/settings', json={'pomodoroLength': 50, 'userId': 'intruder'}, headers=h(user_id)).json()
    assert updated['_id'] == created.json()['_id']
    assert updated['pomodoroLength'] == 50
    assert updated['darkMode'] is True
    assert updated['userId'] == user_id

    assert client.get('/api/settings', headers=h(user_id)).json()['pomodoroLength'] == 50
    assert count_rows(models.UserSettings, user_id) == 1
    assert count_rows(models.UserSettings, 'intruder') == 0


def test_settings_are_separate_per_owner(user_id, other_user_id):
    client.put('/api/settings', json={'dailyGoal': 4}, headers=h(user_id))
    theirs = client.get('/api/settings', headers=h(other_user_id)).json()
    assert theirs['dailyGoal'] is None
    assert client.get('/api/settings', headers=h(user_id)).json()['dailyGoal'] == 4


def test_stats_get_then_upsert(user_id):
    empty = client.get('/api/stats', headers=h(user_id)).json()
    assert empty['streak'] is None
    r = client.put('/api/stats', json={'totalHours': 12.5, 'streak': 3, 'completionRate': 0.8}, headers=h(user_id))
    assert r.status_code == 200
    stats = r.json()
    assert stats['_id'] == empty['_id']
    assert stats['totalHours'] == 12.5
    assert stats['streak'] == 3
    assert count_rows(models.UserStats, user_id) == 1


def test_stats_upsert_rejects_bad_types(user_id):
    r = client.put('/api/stats', json={'streak': 'many'}, headers=h(user_id))
    assert r.status_code == 500
    assert 'Stats validation failed' in r.json()['error']
    assert count_rows(models.UserStats, user_id) == 0


def test_settings_accept_fractional_numbers(user_id):
    r = client.put('/api/settings', json={'dailyGoal': 2.5, 'weeklyGoal': 17.5, 'breakLength': 7.5}, headers=h(user_id))
    assert r.status_code == 200
    assert r.json()['dailyGoal'] == 2.5
    assert r.json()['weeklyGoal'] == 17.5
    assert client.get('/api/settings', headers=h(user_id)).json()['breakLength'] == 7.5
