from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import FrozenSet, Mapping, Optional

from sqlalchemy import select

from portal.models.authz import Permission, Role, RolePermission, User, UserPermission, UserRole

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated user as seen by authorization code.

    ``role_names`` and ``permissions`` are the effective access, resolved once
    per session (at login) and carried in the token claims afterwards.
    """
    user_id: Optional[int] = None
    tenant_id: Optional[str] = None
    role_ids: FrozenSet[int] = frozenset()
    direct_permissions: FrozenSet[str] = frozenset()
    role_names: FrozenSet[str] = frozenset()
    permissions: FrozenSet[str] = frozenset()

    @property
    def is_platform(self) -> bool:
        return self.tenant_id is None


def _as_name_set(raw) -> FrozenSet[str]:
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        return frozenset([raw]) if raw else frozenset()
    return frozenset(str(v) for v in raw if v not in (None, ''))


def _as_id_set(raw) -> FrozenSet[int]:
    if raw is None:
        return frozenset()
    if isinstance(raw, (int, str)):
        raw = [raw]
    out = set()
    for v in raw:
        try:
            out.add(int(v))
        except (TypeError, ValueError):
            log.warning('Ignoring non-integer role id in claims: %r', v)
    return frozenset(out)


def _assigned(principal: Principal, roles: Mapping):
    for rid in sorted(principal.role_ids):
        role = roles.get(rid)
        if role is None:
            log.debug('Assigned role %s for user %s no longer exists', rid, principal.user_id)
            continue
        yield role


def effective_permissions(principal: Principal, roles: Mapping) -> FrozenSet[str]:
    """Union of every assigned role's permissions plus direct grants.

    ``roles`` maps role id to a role carrying ``permissions``. Assignment, not
    tenant visibility, decides inclusion.
    """
    perms = set(principal.direct_permissions)
    for role in _assigned(principal, roles):
        perms |= set(role.permissions)
    return frozenset(perms)


def effective_role_names(principal: Principal, roles: Mapping) -> FrozenSet[str]:
    return frozenset(role.name for role in _assigned(principal, roles))


def resolve_principal(principal: Principal, roles: Mapping) -> Principal:
    return replace(
        principal,
        role_names=effective_role_names(principal, roles),
        permissions=effective_permissions(principal, roles),
    )


def principal_claims(principal: Principal) -> dict:
    """Additional JWT claims for a resolved principal."""
    return {
        'tenant_id': principal.tenant_id,
        'role_ids': sorted(principal.role_ids),
        'roles': sorted(principal.role_names),
        'perms': sorted(principal.permissions),
    }


def principal_from_claims(claims: Mapping) -> Principal:
    """Build a Principal from decoded token claims.

    ``roles``/``perms`` may arrive as a list, a single string or be absent;
    all become frozensets here.
    """
    sub = claims.get('sub')
    try:
        user_id = int(sub) if sub is not None else None
    except (TypeError, ValueError):
        user_id = None
    tenant_id = claims.get('tenant_id') or None
    return Principal(
        user_id=user_id,
        tenant_id=tenant_id,
        role_ids=_as_id_set(claims.get('role_ids')),
        role_names=_as_name_set(claims.get('roles')),
        permissions=_as_name_set(claims.get('perms')),
    )


def current_principal() -> Principal:
    from flask_jwt_extended import get_jwt
    return principal_from_claims(get_jwt())


@dataclass(frozen=True)
class _RoleAccess:
    name: str
    permissions: FrozenSet[str]


def load_principal(user_id: int, session=None) -> Optional[Principal]:
    """Read assignments and direct grants for ``user_id`` and resolve effective access."""
    if session is None:
        from portal import get_db
        session = get_db()
    user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if user is None:
        return None
    role_ids = frozenset(session.execute(
        select(UserRole.role_id).where(UserRole.user_id == user_id)
    ).scalars())
    direct = frozenset(session.execute(
        select(Permission.name)
        .join(UserPermission, UserPermission.permission_id == Permission.id)
        .where(UserPermission.user_id == user_id)
    ).scalars())
    roles = {}
    if role_ids:
        for role in session.execute(select(Role).where(Role.id.in_(list(role_ids)))).scalars():
            roles[role.id] = role
        perms_by_role = {}
        rows = session.execute(
            select(RolePermission.role_id, Permission.name)
            .join(Permission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id.in_(list(role_ids)))
        ).all()
        for rid, name in rows:
            perms_by_role.setdefault(rid, set()).add(name)
        roles = {rid: _RoleAccess(r.name, frozenset(perms_by_role.get(rid, ()))) for rid, r in roles.items()}
    principal = Principal(user_id=user.id, tenant_id=user.tenant_id, role_ids=role_ids, direct_permissions=direct)
    return resolve_principal(principal, roles)


def has_permissions(principal: Principal, *names: str) -> bool:
    """All-of check against effective permissions (fine-grained checks inside a view)."""
    return all(n in principal.permissions for n in names)


def has_role(principal: Principal, *names: str) -> bool:
    return any(n in principal.role_names for n in names)


__all__ = [
    'Principal', 'effective_permissions', 'effective_role_names', 'resolve_principal',
    'principal_claims', 'principal_from_claims', 'current_principal', 'load_principal',
    'has_permissions', 'has_role',
]
