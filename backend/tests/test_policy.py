from portal.services.policy import (
    Principal, effective_permissions, effective_role_names, has_permissions, has_role, load_principal,
    principal_claims, principal_from_claims, resolve_principal,
)
from portal.services.roles import RoleRecord
from tests.test_utils_seed import ensure_role, ensure_user, ensure_user_role_assignment, grant_direct_permissions

ROLES = {
    1: RoleRecord(1, 'End-User', permissions=frozenset({'shops.read', 'report.read'})),
    2: RoleRecord(2, 'Clerk', tenant_id='T9', permissions=frozenset({'shopkpi.read'})),
}


def test_effective_permissions_union_with_direct_grants():
    p = Principal(user_id=5, tenant_id='T1', role_ids=frozenset({1, 2}),
                  direct_permissions=frozenset({'system.logs'}))
    # assignment decides, not the role's tenant
    assert effective_permissions(p, ROLES) == {'shops.read', 'report.read', 'shopkpi.read', 'system.logs'}
    assert effective_role_names(p, ROLES) == {'End-User', 'Clerk'}


def test_missing_roles_are_skipped():
    p = Principal(user_id=5, role_ids=frozenset({1, 42}))
    resolved = resolve_principal(p, ROLES)
    assert resolved.role_names == {'End-User'}
    assert resolved.permissions == {'shops.read', 'report.read'}


def test_no_roles_means_direct_grants_only():
    p = Principal(user_id=5, direct_permissions=frozenset({'brand.read'}))
    assert effective_permissions(p, {}) == {'brand.read'}


def test_claims_round_trip():
    p = Principal(user_id=3, tenant_id='T1', role_ids=frozenset({2, 1}),
                  role_names=frozenset({'End-User'}), permissions=frozenset({'shops.read'}))
    claims = principal_claims(p)
    assert claims == {'tenant_id': 'T1', 'role_ids': [1, 2], 'roles': ['End-User'], 'perms': ['shops.read']}
    back = principal_from_claims({**claims, 'sub': '3'})
    assert back == p


def test_claims_normalize_loose_shapes():
    p = principal_from_claims({'sub': 'x', 'roles': 'End-User', 'perms': None, 'role_ids': ['4', 'bad'], 'tenant_id': ''})
    assert p.user_id is None
    assert p.tenant_id is None
    assert p.is_platform
    assert p.role_names == {'End-User'}
    assert p.permissions == frozenset()
    assert p.role_ids == {4}


def test_has_permissions_and_role():
    p = Principal(role_names=frozenset({'Tenant-Admin'}), permissions=frozenset({'users.read', 'users.write'}))
    assert has_permissions(p, 'users.read', 'users.write')
    assert not has_permissions(p, 'users.read', 'roles.read')
    assert has_role(p, 'End-User', 'Tenant-Admin')
    assert not has_role(p, 'CS-Admin')


def test_load_principal_from_database():
    user = ensure_user('policy-load@test.local', tenant_id='TP')
    role = ensure_role('Policy Viewer', ['shops.read', 'report.read'], tenant_id='TP')
    ensure_user_role_assignment(user, role)
    grant_direct_permissions(user, ['system.logs'])
    p = load_principal(user.id)
    assert p.user_id == user.id
    assert p.tenant_id == 'TP'
    assert p.role_ids == {role.id}
    assert p.role_names == {'Policy Viewer'}
    assert p.direct_permissions == {'system.logs'}
    assert p.permissions == {'shops.read', 'report.read', 'system.logs'}


def test_load_principal_unknown_user():
    assert load_principal(987654) is None
