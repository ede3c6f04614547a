"""Test seeding utilities to reduce duplication.

These helpers create users, tenant/system roles and permission rows. Role
permission sets are stored as given, so callers pass closed sets. The database
is shared across the whole test session; use unique emails and role names.
"""
from typing import Dict, Iterable, List, Optional
from portal import get_db
from portal.models.authz import (
    Permission, Role, RolePermission, User, UserPermission, UserRole, ROLE_KIND_SYSTEM, ROLE_KIND_TENANT,
)
from portal.services.catalog import split_permission_name


def seed_catalog():
    """Insert the permission catalog and the SYSTEM role presets (idempotent)."""
    from scripts import seed_authz
    session = get_db()
    seed_authz.ensure_permissions(session)
    seed_authz.ensure_roles(session)
    session.commit()


def system_role(name: str) -> Role:
    return get_db().query(Role).filter(Role.name == name, Role.tenant_id.is_(None)).one()


def seed_user_with_system_role(email: str, role_name: str, tenant_id: Optional[str] = None) -> User:
    user = ensure_user(email, tenant_id=tenant_id)
    ensure_user_role_assignment(user, system_role(role_name))
    return user


def ensure_permissions(names: Iterable[str]) -> Dict[str, Permission]:
    """Ensure each permission name exists; return dict name->Permission."""
    session = get_db()
    out: Dict[str, Permission] = {}
    for name in names:
        obj = session.query(Permission).filter_by(name=name).one_or_none()
        if not obj:
            resource, action = split_permission_name(name)
            obj = Permission(name=name, category='General', resource=resource, action=action)
            session.add(obj); session.flush()
        out[name] = obj
    session.commit()
    return out


def ensure_user(email: str, name: Optional[str] = None, password: str = 'pw', tenant_id: Optional[str] = None) -> User:
    session = get_db()
    u = session.query(User).filter_by(email=email).one_or_none()
    if not u:
        u = User(name=name or email.split('@')[0], email=email, password_hash='', tenant_id=tenant_id)
        u.set_password(password)
        session.add(u); session.commit(); session.refresh(u)
    return u


def ensure_role(name: str, perm_names: Iterable[str] = (), tenant_id: Optional[str] = None) -> Role:
    """Role in the given scope (SYSTEM when tenant_id is None) holding exactly perm_names."""
    session = get_db()
    q = session.query(Role).filter_by(name=name)
    q = q.filter(Role.tenant_id.is_(None)) if tenant_id is None else q.filter_by(tenant_id=tenant_id)
    role = q.one_or_none()
    perms = ensure_permissions(perm_names) if perm_names else {}
    if not role:
        role = Role(
            name=name, description=name, tenant_id=tenant_id,
            kind=ROLE_KIND_SYSTEM if tenant_id is None else ROLE_KIND_TENANT,
        )
        session.add(role); session.flush()
    # attach any missing permissions
    existing_perm_ids = {rp.permission_id for rp in session.query(RolePermission).filter_by(role_id=role.id)}
    for p in perms.values():
        if p.id not in existing_perm_ids:
            session.add(RolePermission(role_id=role.id, permission_id=p.id))
    session.commit()
    return role


def ensure_user_role_assignment(user: User, role: Role):
    session = get_db()
    if not session.query(UserRole).filter_by(user_id=user.id, role_id=role.id).one_or_none():
        session.add(UserRole(user_id=user.id, role_id=role.id)); session.commit()


def grant_direct_permissions(user: User, names: Iterable[str]):
    session = get_db()
    for p in ensure_permissions(names).values():
        if not session.query(UserPermission).filter_by(user_id=user.id, permission_id=p.id).one_or_none():
            session.add(UserPermission(user_id=user.id, permission_id=p.id))
    session.commit()


def seed_user_with_role(email: str, role_name: str, perm_names: Iterable[str] = (),
                        tenant_id: Optional[str] = None, role_tenant_id: Optional[str] = None):
    """High level convenience: user in ``tenant_id`` + role(with perms) in ``role_tenant_id`` + assignment."""
    user = ensure_user(email, tenant_id=tenant_id)
    role = ensure_role(role_name, perm_names, tenant_id=role_tenant_id)
    ensure_user_role_assignment(user, role)
    return user, role


def login(client, email: str, password: str = 'pw') -> str:
    resp = client.post('/iam/auth/login', json={'email': email, 'password': password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['access_token']


def auth_headers(client, email: str, password: str = 'pw') -> Dict[str, str]:
    return {'Authorization': f'Bearer {login(client, email, password)}'}


def role_names(roles: List) -> List[str]:
    return sorted(r['name'] for r in roles)


__all__ = [
    'seed_catalog', 'system_role', 'seed_user_with_system_role', 'ensure_permissions', 'ensure_user', 'ensure_role', 'ensure_user_role_assignment',
    'grant_direct_permissions', 'seed_user_with_role', 'login', 'auth_headers', 'role_names',
]
