import pytest

from portal.constants.permissions import ALL_PERMISSION_NAMES
from portal.constants.roles import CS_ADMIN, END_USER, TENANT_ADMIN
from portal.models.audit import AuditLog
from portal.services.policy import Principal
from portal.services.routing import RouteAuthorizer
from portal.sitemap.navigation import NAVIGATION_TREE, collapse, filter_navigation, item, navigation_paths
from portal.sitemap.tables import build_route_table
from portal import get_db
from tests.test_utils_seed import auth_headers, seed_user_with_system_role


@pytest.fixture(scope='module')
def authorizer():
    return RouteAuthorizer(build_route_table())


def _keys(tree):
    out = []
    for entry in tree:
        out.append(entry.key)
        out.extend(_keys(entry.sub_menu))
    return out


def test_every_menu_path_resolves(authorizer):
    for path in navigation_paths(NAVIGATION_TREE):
        assert authorizer.match_route(path) is not None, path


def test_cs_admin_menu(authorizer):
    p = Principal(user_id=1, role_names=frozenset({CS_ADMIN}), permissions=frozenset(ALL_PERMISSION_NAMES))
    keys = _keys(filter_navigation(NAVIGATION_TREE, p, authorizer))
    assert 'tenantportal.roles' in keys
    assert 'activityLog' in keys
    # tenant screens are not reachable for platform roles
    assert 'home' not in keys
    assert 'adminMenu' not in keys


def test_end_user_menu(authorizer):
    p = Principal(user_id=2, tenant_id='T1', role_names=frozenset({END_USER}),
                  permissions=frozenset({'shops.read', 'shopkpi.read', 'report.read'}))
    tree = filter_navigation(NAVIGATION_TREE, p, authorizer)
    keys = _keys(tree)
    assert keys[:2] == ['home', 'tenantDashboard']
    assert 'shopKPI.shopKpi' in keys
    assert 'tenantportal' not in keys
    # every parts route needs a CS role, Tenant-Admin or a parts permission
    assert 'partsManagement' not in keys
    assert 'accounting.masterChartOfAccount' not in keys
    assert 'accounting.chartOfAccounts' in keys


def test_permission_only_principal(authorizer):
    p = Principal(user_id=3, tenant_id='T1', permissions=frozenset({'shops.read'}))
    tree = filter_navigation(NAVIGATION_TREE, p, authorizer)
    shop_kpi = next(e for e in tree if e.key == 'shopKPI')
    assert [c.key for c in shop_kpi.sub_menu] == ['shopKPI.shopProperties']


def test_empty_groups_and_unknown_paths_dropped(authorizer):
    tree = (
        collapse('g', 'Group', [item('g.settings', 'Settings', '/app/settings', [TENANT_ADMIN])], [END_USER]),
        item('ghost', 'Ghost', '/does/not/exist'),
        item('dash', 'Dashboard', '/app/tenant-dashboard'),
    )
    p = Principal(user_id=4, tenant_id='T1', role_names=frozenset({END_USER}))
    assert _keys(filter_navigation(tree, p, authorizer)) == ['dash']
    assert filter_navigation(tree, None, authorizer) == []


def test_nav_item_to_dict():
    entry = collapse('c', 'C', [item('c.a', 'A', '/a', ['x'])], icon='i')
    d = entry.to_dict()
    assert d['type'] == 'collapse'
    assert d['subMenu'][0] == {
        'key': 'c.a', 'title': 'A', 'path': '/a', 'type': 'item', 'icon': None,
        'authority': ['x'], 'subMenu': [],
    }


def test_menu_and_routes_api(client):
    seed_user_with_system_role('nav-tenant-admin@test.local', TENANT_ADMIN, tenant_id='NAV1')
    headers = auth_headers(client, 'nav-tenant-admin@test.local')
    menu = client.get('/nav/menu', headers=headers)
    assert menu.status_code == 200
    top = [e['key'] for e in menu.get_json()['data']]
    assert 'adminMenu' in top
    assert 'tenantportal' not in top
    routes = client.get('/nav/routes', headers=headers).get_json()
    keys = {r['key'] for r in routes['data']}
    assert routes['total'] == len(routes['data'])
    assert 'app.settings' in keys
    assert 'tenantportal.users' not in keys
    assert 'signIn' not in keys
    assert client.get('/nav/home', headers=headers).get_json() == {'path': '/app/tenant-dashboard'}


def test_nav_requires_token(client):
    assert client.get('/nav/menu').status_code == 401
    assert client.get('/nav/routes').status_code == 401


def test_authorize_api(client):
    seed_user_with_system_role('nav-end-user@test.local', END_USER, tenant_id='NAV2')
    headers = auth_headers(client, 'nav-end-user@test.local')
    ok = client.get('/nav/authorize?path=/app/reports/17', headers=headers).get_json()
    assert ok == {'allowed': True, 'path': '/app/reports/17', 'route': 'app.reports.view',
                  'portal': 'app', 'params': {'id': '17'}}
    denied = client.get('/nav/authorize', query_string={'path': '/app/settings'}, headers=headers)
    assert denied.status_code == 200
    body = denied.get_json()
    assert body['allowed'] is False
    assert body['reason'] == 'forbidden'
    assert body['redirect_to'] == '/access-denied'
    missing = client.get('/nav/authorize', query_string={'path': '/nope'}, headers=headers).get_json()
    assert missing['reason'] == 'not_found'
    assert missing['route'] is None
    actions = {a.action for a in get_db().query(AuditLog).filter(AuditLog.actor_tenant_id == 'NAV2')}
    assert {'ROUTE.DENIED', 'ROUTE.NOT_FOUND'} <= actions


def test_authorize_api_anonymous(client):
    public = client.get('/nav/authorize', query_string={'path': '/sign-up'}).get_json()
    assert public['allowed'] is True
    anon = client.get('/nav/authorize', query_string={'path': '/app/settings'}).get_json()
    assert anon['reason'] == 'unauthenticated'
    assert anon['redirect_to'] == '/sign-in'
    assert client.get('/nav/authorize').status_code == 400
