import base64
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy.exc import OperationalError

from depotlifecycle import create_app, db
from depotlifecycle.models import Party, Release
from depotlifecycle.estimates import routes as estimate_routes
from depotlifecycle.releases import routes as release_routes


def setup_app(**overrides):
    return create_app('testing', overrides)


def auth(user='depot', password='depot'):
    token = base64.b64encode(f'{user}:{password}'.encode()).decode()
    return {'Authorization': f'Basic {token}'}


def test_store_failure_is_500_and_rolls_back_parties(monkeypatch):
    app = setup_app()

    def broken_save(release):
        raise OperationalError('INSERT INTO release', {}, Exception('disk I/O error'))

    monkeypatch.setattr(release_routes.release_repository, 'save', broken_save)
    client = app.test_client()
    resp = client.post('/api/v2/release', json={
        'releaseNumber': 'RHAMG000000',
        'depot': {'code': 'DEHAMCMRA'},
    }, headers=auth())
    assert resp.status_code == 500
    assert resp.get_json() == {'code': 'ERR500', 'message': 'Internal storage error'}
    with app.app_context():
        # the depot upsert shares the failed transaction
        assert db.session.get(Party, 'DEHAMCMRA') is None
        assert Release.query.count() == 0


def test_paused_api_answers_503():
    app = setup_app(API_PAUSED=True)
    client = app.test_client()
    resp = client.get('/api/v2/release', headers=auth())
    assert resp.status_code == 503
    resp = client.post('/api/v2/estimate', json={}, headers=auth())
    assert resp.status_code == 503


def test_unknown_user_is_rejected():
    app = setup_app(API_USERS={'ops': 's3cr3t'})
    client = app.test_client()
    assert client.get('/api/v2/release', headers=auth()).status_code == 401
    assert client.get('/api/v2/release', headers=auth('ops', 's3cr3t')).status_code == 404


def test_unknown_route_uses_json_not_found():
    app = setup_app()
    client = app.test_client()
    resp = client.get('/api/v2/nothing-here')
    assert resp.status_code == 404
    assert resp.get_json() == {'message': 'Not Found'}


def test_unexpected_fault_is_json_500_and_rolls_back_parties(monkeypatch):
    app = setup_app(PROPAGATE_EXCEPTIONS=False)

    def broken_save(release):
        raise OverflowError('Python int too large to convert to SQLite INTEGER')

    monkeypatch.setattr(release_routes.release_repository, 'save', broken_save)
    client = app.test_client()
    resp = client.post('/api/v2/release', json={
        'releaseNumber': 'RHAMG000000',
        'depot': {'code': 'DEHAMCMRA'},
    }, headers=auth())
    assert resp.status_code == 500
    assert resp.is_json
    assert resp.get_json() == {'code': 'ERR999', 'message': 'Internal server error'}
    with app.app_context():
        assert db.session.get(Party, 'DEHAMCMRA') is None


def test_method_not_allowed_is_json():
    app = setup_app()
    client = app.test_client()
    resp = client.delete('/api/v2/release', headers=auth())
    assert resp.status_code == 405
    assert resp.is_json
    assert resp.get_json() == {'message': 'Method Not Allowed'}
    assert 'POST' in resp.headers['Allow']


def test_racing_release_create_is_400(monkeypatch):
    app = setup_app()
    client = app.test_client()
    release = {'releaseNumber': 'RHAMG000000', 'depot': {'code': 'DEHAMCMRA'}}
    assert client.post('/api/v2/release', json=release, headers=auth()).status_code == 200

    # the second request passes the existence check before the first commits
    monkeypatch.setattr(release_routes.release_repository, 'exists', lambda number: False)
    resp = client.post('/api/v2/release', json=dict(release, type='SALE'), headers=auth())
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['code'] == 'ERR000'
    assert 'already exists; please update instead' in body['message']
    with app.app_context():
        assert Release.query.count() == 1
        assert db.session.get(Release, 'RHAMG000000').type is None


def test_racing_estimate_create_is_400(monkeypatch):
    app = setup_app()
    client = app.test_client()
    estimate = {
        'estimateNumber': 'DEHAMCE1856373',
        'revision': 0,
        'depot': {'code': 'DEHAMCMRA'},
    }
    assert client.post('/api/v2/estimate', json=estimate, headers=auth()).status_code == 200

    monkeypatch.setattr(estimate_routes.estimate_repository, 'exists',
                        lambda number, revision: False)
    resp = client.post('/api/v2/estimate', json=estimate, headers=auth())
    assert resp.status_code == 400
    assert resp.get_json() == {'code': 'ERR000', 'message': 'Estimate revision already exists.'}
