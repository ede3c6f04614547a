from portal.constants.permissions import ALL_PERMISSION_NAMES, ROLE_PRESETS
from portal.constants.roles import ALL_ROLES
from portal.sitemap.navigation import NAVIGATION_TREE
from portal.sitemap.tables import build_route_table


def _nav_authorities(tree):
    for entry in tree:
        yield entry.key, entry.authority
        yield from _nav_authorities(entry.sub_menu)


def test_route_authorities_are_known_names():
    known = set(ALL_ROLES) | set(ALL_PERMISSION_NAMES)
    unknown = sorted({(r.key, a) for r in build_route_table() for a in r.authority if a not in known})
    assert not unknown, f'Route authorities not in roles or catalog: {unknown}'


def test_navigation_authorities_are_known_names():
    known = set(ALL_ROLES) | set(ALL_PERMISSION_NAMES)
    unknown = sorted({(k, a) for k, auth in _nav_authorities(NAVIGATION_TREE) for a in auth if a not in known})
    assert not unknown, f'Navigation authorities not in roles or catalog: {unknown}'


def test_presets_reference_catalog_permissions():
    missing = sorted({p for perms in ROLE_PRESETS.values() for p in perms if p != '*' and p not in ALL_PERMISSION_NAMES})
    assert not missing, f'Preset permissions missing from catalog: {missing}'
    assert set(ROLE_PRESETS) <= set(ALL_ROLES)


def test_permission_routes_reachable_by_some_preset(resolver):
    # a route guarded only by permissions must be openable by at least one seeded role
    preset_perms = [
        resolver.catalog.names if '*' in raw else resolver.close_requested(raw)
        for raw in ROLE_PRESETS.values()
    ]
    roles = set(ALL_ROLES)
    orphaned = []
    for r in build_route_table():
        if r.authority and not any(a in roles for a in r.authority):
            if not any(any(a in perms for a in r.authority) for perms in preset_perms):
                orphaned.append(r.key)
    assert not orphaned
