import pytest

from portal.constants.roles import CS_ADMIN, CS_USER, END_USER, TENANT_ADMIN
from portal.errors import RouteNotFound, RouteTableError
from portal.services.policy import Principal
from portal.services.routing import (
    DENIED_FORBIDDEN, DENIED_NOT_FOUND, DENIED_UNAUTHENTICATED, RouteAuthorizer, RouteTableBuilder,
    has_authority, normalize_path, role_names_with_aliases, route, split_path,
)
from portal.sitemap.tables import PORTAL_GROUPS, build_route_table


def _principal(*roles, perms=(), tenant='T1'):
    return Principal(user_id=1, tenant_id=tenant, role_names=frozenset(roles), permissions=frozenset(perms))


@pytest.fixture(scope='module')
def authorizer():
    return RouteAuthorizer(build_route_table())


def test_path_helpers():
    assert split_path('/admin//shops/7/?tab=1#top') == ('admin', 'shops', '7')
    assert normalize_path('admin/shops/') == '/admin/shops'
    assert normalize_path('') == '/'


def test_route_match_extracts_params():
    r = route('x', '/admin/shops/:id/edit')
    assert r.match('/admin/shops/42/edit') == {'id': '42'}
    assert r.match('/admin/shops/42') is None
    assert r.match('/admin/shop/42/edit') is None
    assert r.is_parameterized
    assert not route('y', '/admin/shops').is_parameterized


def test_first_match_wins():
    table = RouteTableBuilder().add_group('a', [
        route('create', '/items/create', authority=['writer']),
        route('view', '/items/:id', authority=['reader']),
    ]).build()
    authz = RouteAuthorizer(table)
    assert authz.match_route('/items/create').key == 'create'
    assert authz.match_route('/items/9').key == 'view'
    assert authz.match_route('/items') is None


def test_builder_rejects_shadowing_param():
    builder = RouteTableBuilder().add_group('a', [
        route('view', '/items/:id'),
        route('create', '/items/create'),
    ])
    with pytest.raises(RouteTableError) as exc:
        builder.build()
    assert 'shadows' in str(exc.value)


def test_builder_rejects_shadowing_across_groups():
    builder = (RouteTableBuilder()
               .add_group('first', [route('any', '/x/:a/:b')])
               .add_group('second', [route('lit', '/x/y/z')]))
    with pytest.raises(RouteTableError):
        builder.build()


@pytest.mark.parametrize('routes', [
    [route('a', '/one'), route('a', '/two')],
    [route('a', '/one'), route('b', '/one/')],
    [route('a', '/x/:id'), route('b', '/x/:slug')],
    [route('a', 'no-slash')],
    [route('a', '/x/:')],
])
def test_builder_rejects_bad_tables(routes):
    with pytest.raises(RouteTableError):
        RouteTableBuilder().add_group('g', routes).build()


def test_builder_allows_non_overlapping_params():
    table = RouteTableBuilder().add_group('g', [
        route('edit', '/p/:id/edit'),
        route('view', '/p/:id/view'),
        route('list', '/p'),
    ]).build()
    assert [r.portal for r in table] == ['g', 'g', 'g']


def test_or_semantics():
    assert has_authority(_principal(END_USER), [TENANT_ADMIN, END_USER])
    assert has_authority(_principal(perms=['users.read']), [TENANT_ADMIN, 'users.read'])
    assert not has_authority(_principal(END_USER), [TENANT_ADMIN, 'users.read'])
    assert has_authority(_principal(), [])
    assert not has_authority(None, [])


def test_end_user_denied_settings(authorizer):
    decision = authorizer.authorize(_principal(END_USER), '/app/settings')
    assert not decision
    assert decision.reason == DENIED_FORBIDDEN
    assert decision.redirect_to == '/access-denied'
    assert decision.route.key == 'app.settings'


def test_tenant_admin_allowed_settings(authorizer):
    decision = authorizer.authorize(_principal(TENANT_ADMIN), '/app/settings')
    assert decision
    assert decision.route.key == 'app.settings'


def test_permission_opens_route(authorizer):
    p = _principal(perms=['shops.read'])
    decision = authorizer.authorize(p, '/admin/shops/15/view')
    assert decision
    assert decision.params == {'id': '15'}
    assert not authorizer.authorize(p, '/admin/shops/15/edit')


def test_literal_before_param_in_real_table(authorizer):
    assert authorizer.match_route('/admin/shops/create').key == 'adminMenu.shops.create'
    assert authorizer.match_route('/tenantportal/tenant/workspaces/import-status').key == 'adminMenu.workspaces.import-status'
    assert authorizer.match_route('/tenantportal/tenant/workspaces/w1').key == 'adminMenu.workspaces.details'


def test_not_found_and_unauthenticated(authorizer):
    missing = authorizer.authorize(_principal(CS_ADMIN), '/nowhere/at/all')
    assert missing.reason == DENIED_NOT_FOUND
    assert missing.redirect_to == '/access-denied'
    assert missing.route is None
    anon = authorizer.authorize(None, '/app/settings')
    assert anon.reason == DENIED_UNAUTHENTICATED
    assert anon.redirect_to == '/sign-in'


def test_public_routes(authorizer):
    assert authorizer.authorize(None, '/sign-in')
    assert authorizer.authorize(_principal(END_USER), '/forgot-password')
    keys = {r.key for r in authorizer.accessible_routes(_principal(CS_ADMIN))}
    assert not any(authorizer.table[k].is_public for k in keys)
    assert authorizer.accessible_routes(None) == []


def test_empty_authority_routes(authorizer):
    p = _principal()
    assert authorizer.authorize(p, '/home')
    assert authorizer.authorize(p, '/access-denied')
    assert not authorizer.authorize(p, '/app/dashboard')


def test_require_route(authorizer):
    assert authorizer.require_route('/reports').key == 'reports'
    with pytest.raises(RouteNotFound):
        authorizer.require_route('/reportz')


def test_guard_calls_redirect_on_denial(authorizer):
    targets = []
    authorizer.guard(_principal(END_USER), '/tenantportal/users', targets.append)
    authorizer.guard(_principal(CS_ADMIN), '/tenantportal/users', targets.append)
    authorizer.guard(None, '/tenantportal/users', targets.append)
    assert targets == ['/access-denied', '/sign-in']


@pytest.mark.parametrize('roles,expected', [
    ((CS_ADMIN, END_USER), '/tenantportal/dashboard'),
    ((CS_USER,), '/admin/dashboard'),
    ((END_USER, TENANT_ADMIN), '/app/tenant-dashboard'),
    (('admin',), '/tenantportal/dashboard'),
    (('user',), '/admin/dashboard'),
    (('Clerk',), '/home'),
    ((), '/home'),
])
def test_home_path(authorizer, roles, expected):
    assert authorizer.home_path(_principal(*roles)) == expected


def test_legacy_role_names_carry_current_authority(authorizer):
    assert has_authority(_principal('admin'), [CS_ADMIN])
    assert has_authority(_principal('user'), [CS_USER])
    assert not has_authority(_principal('user'), [CS_ADMIN])
    assert not has_authority(_principal('admin'), [CS_ADMIN], aliases={})
    assert role_names_with_aliases(_principal('admin', END_USER)) == {'admin', CS_ADMIN, END_USER}
    for roles in (('admin',), ('user',)):
        p = _principal(*roles)
        home = authorizer.home_path(p)
        assert authorizer.authorize(p, home), home
        assert home in {r.path for r in authorizer.accessible_routes(p)}


def test_home_path_without_principal(authorizer):
    assert authorizer.home_path(None) == '/home'
    assert authorizer.highest_role(None) is None


def test_real_table_is_valid_and_ordered():
    table = build_route_table()
    assert table.portals() == [name for name, _ in PORTAL_GROUPS]
    RouteTableBuilder.validate(table.routes)
    assert table.get('app.settings').authority == (TENANT_ADMIN,)


def test_route_to_dict():
    r = build_route_table()['reports']
    d = r.to_dict()
    assert d['path'] == '/reports'
    assert d['portal'] == 'app'
    assert d['authority'] == [END_USER, 'report.read', 'report.all']
