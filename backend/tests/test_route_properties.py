"""Randomized checks: listing and per-path authorization never disagree."""
import random

from portal.constants.permissions import ALL_PERMISSION_NAMES
from portal.constants.roles import ALL_ROLES
from portal.services.policy import Principal
from portal.services.routing import RouteAuthorizer, RouteDescriptor, RouteTableBuilder
from portal.sitemap.tables import build_route_table

SEGMENTS = ['app', 'admin', 'shops', 'users', 'roles', 'reports', 'edit', 'view', 'create']
AUTHORITY_POOL = ALL_ROLES + ALL_PERMISSION_NAMES[:12]


def _random_principal(rng):
    return Principal(
        user_id=rng.randint(1, 1000),
        tenant_id=rng.choice([None, 'T1', 'T2']),
        role_names=frozenset(rng.sample(ALL_ROLES, rng.randint(0, 2))),
        permissions=frozenset(rng.sample(ALL_PERMISSION_NAMES, rng.randint(0, 6))),
    )


def _random_routes(rng, count):
    routes, seen = [], set()
    while len(routes) < count:
        segs = [rng.choice(SEGMENTS) for _ in range(rng.randint(1, 3))]
        if len(segs) > 1 and rng.random() < 0.3:
            segs[-1] = ':id'
        path = '/' + '/'.join(segs)
        candidate = RouteDescriptor(
            key=f'r{len(routes)}', path=path,
            authority=tuple(rng.sample(AUTHORITY_POOL, rng.randint(0, 3))),
        )
        if path in seen:
            continue
        try:
            RouteTableBuilder.validate(routes + [candidate])
        except ValueError:
            continue
        seen.add(path)
        routes.append(candidate)
    return routes


def _concrete(path):
    return '/'.join('42' if s.startswith(':') else s for s in path.split('/'))


def _assert_consistent(authorizer, principal):
    listed = {r.key for r in authorizer.accessible_routes(principal)}
    for r in authorizer.table:
        decision = authorizer.authorize(principal, _concrete(r.path))
        if r.key in listed:
            assert decision, (r.key, principal)
            assert decision.route.key == r.key
        elif not r.is_public:
            assert not decision or decision.route.key != r.key


def test_accessible_routes_never_denied_on_random_tables():
    rng = random.Random(20240601)
    for _ in range(100):
        groups = RouteTableBuilder()
        routes = _random_routes(rng, rng.randint(3, 12))
        split = rng.randint(0, len(routes))
        groups.add_group('public' if rng.random() < 0.2 else 'one', routes[:split])
        groups.add_group('two', routes[split:])
        authorizer = RouteAuthorizer(groups.build())
        _assert_consistent(authorizer, _random_principal(rng))


def test_accessible_routes_never_denied_on_application_table():
    rng = random.Random(99)
    authorizer = RouteAuthorizer(build_route_table())
    for _ in range(100):
        _assert_consistent(authorizer, _random_principal(rng))
