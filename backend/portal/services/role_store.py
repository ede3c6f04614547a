from __future__ import annotations
from typing import Iterable, List, Optional

from sqlalchemy import delete, or_, select

from portal.errors import RoleNotFound, UnknownPermission
from portal.models.authz import Permission, Role, RolePermission
from portal.services.roles import RoleCreate, RoleRecord, RoleUpdate


def to_record(role: Role) -> RoleRecord:
    return RoleRecord(
        id=role.id,
        name=role.name,
        kind=role.kind,
        tenant_id=role.tenant_id,
        permissions=frozenset(rp.permission.name for rp in role.permissions),
        description=role.description,
    )


class SqlRoleRepository:
    """Role persistence on the scoped SQLAlchemy session.

    Writes are flushed, not committed; the caller owns the transaction so the
    audit row lands in the same commit.
    """

    def __init__(self, session=None):
        if session is None:
            from portal import get_db
            session = get_db()
        self.session = session

    def _row(self, role_id: int) -> Optional[Role]:
        return self.session.execute(select(Role).where(Role.id == role_id)).scalar_one_or_none()

    def get(self, role_id: int) -> Optional[RoleRecord]:
        role = self._row(role_id)
        return to_record(role) if role else None

    def list(self, tenant_id: Optional[str] = None, include_system: bool = True,
             kind: Optional[str] = None) -> List[RoleRecord]:
        q = select(Role)
        scope = []
        if tenant_id is not None:
            scope.append(Role.tenant_id == tenant_id)
        if include_system:
            scope.append(Role.tenant_id.is_(None))
        if not scope:
            return []
        q = q.where(or_(*scope))
        if kind:
            q = q.where(Role.kind == kind)
        return [to_record(r) for r in self.session.execute(q.order_by(Role.id.asc())).scalars()]

    def find_by_name(self, name: str, tenant_id: Optional[str]) -> Optional[RoleRecord]:
        q = select(Role).where(Role.name == name)
        q = q.where(Role.tenant_id.is_(None)) if tenant_id is None else q.where(Role.tenant_id == tenant_id)
        role = self.session.execute(q).scalar_one_or_none()
        return to_record(role) if role else None

    def _permission_rows(self, names: Iterable[str]) -> List[Permission]:
        names = sorted(set(names))
        if not names:
            return []
        rows = self.session.execute(select(Permission).where(Permission.name.in_(names))).scalars().all()
        found = {p.name for p in rows}
        for name in names:
            if name not in found:
                raise UnknownPermission(name)
        return rows

    def update(self, role_id: int, changes: RoleUpdate) -> RoleRecord:
        role = self._row(role_id)
        if role is None:
            raise RoleNotFound(role_id)
        perms = self._permission_rows(changes.permissions)
        role.name = changes.name
        role.description = changes.description
        self.session.execute(delete(RolePermission).where(RolePermission.role_id == role.id))
        self.session.expire(role, ['permissions'])
        for p in perms:
            self.session.add(RolePermission(role_id=role.id, permission_id=p.id))
        self.session.flush()
        self.session.refresh(role)
        return to_record(role)

    def create(self, data: RoleCreate) -> RoleRecord:
        perms = self._permission_rows(data.permissions)
        role = Role(name=data.name, kind=data.kind, tenant_id=data.tenant_id, description=data.description)
        self.session.add(role)
        self.session.flush()
        for p in perms:
            self.session.add(RolePermission(role_id=role.id, permission_id=p.id))
        self.session.flush()
        self.session.refresh(role)
        return to_record(role)


__all__ = ['SqlRoleRepository', 'to_record']
