from fastapi.testclient import TestClient
from study_tracker.main import app
from study_tracker.config import settings

client = TestClient(app)


def test_missing_user_header_is_rejected():
    r = client.get('/api/subjects')
    assert r.status_code == 401
    assert r.json() == {'error': 'user-id header required'}
    blank = client.get('/api/goals', headers={'user-id': '   '})
    assert blank.status_code == 401


def test_health_and_request_id():
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers
    echoed = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert echoed.headers['X-Request-ID'] == 'abc123'


def test_oversized_body_is_rejected(monkeypatch, user_id):
    monkeypatch.setattr(settings, 'MAX_BODY_BYTES', 64)
    r = client.post('/api/documents', json={'name': 'big', 'dataUrl': 'x' * 200}, headers={'user-id': user_id})
    assert r.status_code == 413
    assert r.json() == {'error': 'request entity too large'}
    assert client.get('/api/documents', headers={'user-id': user_id}).json() == []


def test_api_explorer_is_served():
    r = client.get('/api-docs')
    assert r.status_code == 200
    assert 'swagger' in r.text.lower()
    openapi = client.get('/openapi.json').json()
    assert '/api/subjects/{subject_id}' in openapi['paths']
    assert 'put' not in openapi['paths']['/api/grades/{grade_id}']


def test_home_page_links_explorer():
    r = client.get('/')
    assert r.status_code == 200
    assert '/api-docs' in r.text


def test_api_explorer_groups_routes_by_resource():
    paths = client.get('/openapi.json').json()['paths']
    assert paths['/api/subjects']['get']['tags'] == ['Subjects']
    assert paths['/api/schedule/{entry_id}']['put']['tags'] == ['Schedule']
    assert paths['/api/goals']['post']['tags'] == ['Goals']
    assert paths['/api/grades/{grade_id}']['delete']['tags'] == ['Grades']
    assert paths['/api/documents']['get']['tags'] == ['Documents']
    assert paths['/api/settings']['put']['tags'] == ['Settings']
    assert paths['/api/stats']['get']['tags'] == ['Stats']
