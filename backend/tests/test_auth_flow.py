from portal.models.authz import User
from portal import get_db
from portal.constants.roles import CS_USER
from tests.test_utils_seed import ensure_role, ensure_user_role_assignment, grant_direct_permissions, system_role


def test_login_and_me(client):
    # Seed a user manually
    session = get_db()
    u = User(name='T', email='t@example.com', password_hash='', tenant_id='AF1')
    u.set_password('pw')
    session.add(u)
    session.commit()
    ensure_user_role_assignment(u, ensure_role('AF1 Reader', ['report.read'], tenant_id='AF1'))
    grant_direct_permissions(u, ['system.logs'])

    # Login
    resp = client.post('/iam/auth/login', json={'email': 't@example.com', 'password': 'pw'})
    assert resp.status_code == 200, resp.get_json()
    token = resp.get_json()['access_token']
    assert resp.get_json()['home_path'] == '/home'

    me = client.get('/iam/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert me.status_code == 200
    body = me.get_json()
    assert body['email'] == 't@example.com'
    assert body['tenant_id'] == 'AF1'
    assert body['roles'] == ['AF1 Reader']
    assert body['perms'] == ['report.read', 'system.logs']


def test_login_home_path_follows_highest_role(client):
    session = get_db()
    u = User(name='CS', email='cs-user@example.com', password_hash='')
    u.set_password('pw')
    session.add(u)
    session.commit()
    ensure_user_role_assignment(u, system_role(CS_USER))
    resp = client.post('/iam/auth/login', json={'email': 'cs-user@example.com', 'password': 'pw'})
    assert resp.get_json()['home_path'] == '/admin/dashboard'


def test_login_rejects_bad_credentials(client):
    assert client.post('/iam/auth/login', json={'email': 't@example.com', 'password': 'nope'}).status_code == 401
    assert client.post('/iam/auth/login', json={'email': 'missing@example.com', 'password': 'pw'}).status_code == 401
    resp = client.post('/iam/auth/login', json={'email': 't@example.com'})
    assert resp.status_code == 400
    assert resp.get_json()['error']['status'] == 400


def test_me_requires_token(client):
    assert client.get('/iam/auth/me').status_code == 401


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
