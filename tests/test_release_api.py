import base64
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from depotlifecycle import create_app, db
from depotlifecycle.models import Party, Release


def setup_app():
    return create_app('testing')


def auth(user='depot', password='depot'):
    token = base64.b64encode(f'{user}:{password}'.encode()).decode()
    return {'Authorization': f'Basic {token}'}


RELEASE = {
    'releaseNumber': 'RHAMG000000',
    'type': 'BOOK',
    'depot': {'code': 'DEHAMCMRA', 'name': 'Hamburg Depot'},
    'recipient': {'code': 'DEHAMTRCK'},
    'details': [
        {'customer': {'code': 'SGSINONEA'}, 'equipment': '22G1', 'quantity': 2},
    ],
}


def test_search_unknown_release_is_404():
    app = setup_app()
    client = app.test_client()
    resp = client.get('/api/v2/release?releaseNumber=NOPE', headers=auth())
    assert resp.status_code == 404
    assert resp.get_json() == {'message': 'Not Found'}


def test_search_all_empty_is_404():
    app = setup_app()
    client = app.test_client()
    resp = client.get('/api/v2/release', headers=auth())
    assert resp.status_code == 404


def test_create_upserts_depot_and_returns_no_body():
    app = setup_app()
    client = app.test_client()
    payload = {'releaseNumber': 'RHAMG000000', 'depot': {'code': 'DEHAMCMRA'}}
    resp = client.post('/api/v2/release', json=payload, headers=auth())
    assert resp.status_code == 200
    assert resp.data == b''
    with app.app_context():
        assert db.session.get(Party, 'DEHAMCMRA') is not None
        release = db.session.get(Release, 'RHAMG000000')
        assert release.depot.code == 'DEHAMCMRA'


def test_create_twice_fails_and_keeps_original():
    app = setup_app()
    client = app.test_client()
    assert client.post('/api/v2/release', json=RELEASE, headers=auth()).status_code == 200

    changed = dict(RELEASE, type='SALE', details=[])
    resp = client.post('/api/v2/release', json=changed, headers=auth())
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['code'] == 'ERR000'
    assert 'already exists; please update instead' in body['message']
    with app.app_context():
        release = db.session.get(Release, 'RHAMG000000')
        assert release.type == 'BOOK'
        assert len(release.details) == 1


def test_create_then_search_returns_all_parties():
    app = setup_app()
    client = app.test_client()
    client.post('/api/v2/release', json=RELEASE, headers=auth())

    resp = client.get('/api/v2/release?releaseNumber=RHAMG000000', headers=auth())
    assert resp.status_code == 200
    releases = resp.get_json()
    assert len(releases) == 1
    found = releases[0]
    assert found['depot']['name'] == 'Hamburg Depot'
    assert found['recipient']['code'] == 'DEHAMTRCK'
    assert found['details'][0]['customer']['code'] == 'SGSINONEA'
    assert found['details'][0]['quantity'] == 2

    resp = client.get('/api/v2/release', headers=auth())
    assert [r['releaseNumber'] for r in resp.get_json()] == ['RHAMG000000']
    with app.app_context():
        for code in ('DEHAMCMRA', 'DEHAMTRCK', 'SGSINONEA'):
            assert db.session.get(Party, code) is not None


def test_create_requires_release_number():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/api/v2/release', json={'depot': {'code': 'DEHAMCMRA'}}, headers=auth())
    assert resp.status_code == 400
    assert resp.get_json()['code'] == 'ERR000'
    with app.app_context():
        assert db.session.get(Party, 'DEHAMCMRA') is None


def test_create_rejects_long_release_number():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/api/v2/release', json={'releaseNumber': 'R' * 17}, headers=auth())
    assert resp.status_code == 400


def test_create_rejects_non_object_body():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/api/v2/release', json=['RHAMG000000'], headers=auth())
    assert resp.status_code == 400


def test_update_unknown_release_has_no_side_effects():
    app = setup_app()
    client = app.test_client()
    resp = client.put('/api/v2/release/RHAMG000000', json=RELEASE, headers=auth())
    assert resp.status_code == 400
    assert resp.get_json() == {'code': 'ERR000', 'message': 'Release does not exist.'}
    with app.app_context():
        assert Party.query.count() == 0
        assert Release.query.count() == 0


def test_update_replaces_details_and_upserts_parties():
    app = setup_app()
    client = app.test_client()
    client.post('/api/v2/release', json=RELEASE, headers=auth())

    update = {
        'status': 'CLSD',
        'depot': {'code': 'DEHAMCMRA', 'city': 'Hamburg'},
        'details': [
            {'customer': {'code': 'USNYCMSCA'}, 'equipment': '45G1'},
            {'equipment': '22G1', 'quantity': 3},
        ],
    }
    resp = client.put('/api/v2/release/RHAMG000000', json=update, headers=auth())
    assert resp.status_code == 200

    with app.app_context():
        release = db.session.get(Release, 'RHAMG000000')
        assert release.status == 'CLSD'
        assert release.recipient is None
        assert [d.equipment for d in release.details] == ['45G1', '22G1']
        assert release.details[0].customer.code == 'USNYCMSCA'
        depot = db.session.get(Party, 'DEHAMCMRA')
        # name kept from the first save, city added by the update
        assert depot.name == 'Hamburg Depot'
        assert depot.city == 'Hamburg'
        assert db.session.get(Party, 'USNYCMSCA') is not None


def test_update_rejects_mismatched_release_number():
    app = setup_app()
    client = app.test_client()
    client.post('/api/v2/release', json=RELEASE, headers=auth())
    resp = client.put('/api/v2/release/RHAMG000000',
                      json={'releaseNumber': 'RHAMG000001'}, headers=auth())
    assert resp.status_code == 400


def test_requests_need_credentials():
    app = setup_app()
    client = app.test_client()
    resp = client.get('/api/v2/release')
    assert resp.status_code == 401
    assert resp.headers['WWW-Authenticate'].startswith('Basic')
    resp = client.get('/api/v2/release', headers=auth(password='wrong'))
    assert resp.status_code == 401


def test_create_rejects_out_of_range_quantity():
    app = setup_app()
    client = app.test_client()
    huge = dict(RELEASE, details=[{'equipment': '22G1', 'quantity': 2**70}])
    resp = client.post('/api/v2/release', json=huge, headers=auth())
    assert resp.status_code == 400
    assert resp.get_json() == {'code': 'ERR000', 'message': 'quantity must be at most 2147483647'}
    with app.app_context():
        assert Release.query.count() == 0
        assert Party.query.count() == 0
