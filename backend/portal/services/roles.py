"""Role & tenant scoping.

Visibility rule: a SYSTEM role (no tenant) is visible to every principal; a
TENANT role is visible only to principals of exactly the same tenant. Platform
principals (no tenant) therefore see SYSTEM roles only.

Permission edits go through the closure resolver; ``save`` re-checks every
rule against the stored row because the role it receives has travelled through
client-editable state.
"""
from __future__ import annotations
import logging
import re
import threading
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Optional, Protocol

from portal.errors import (
    AccessDenied, DuplicateRoleName, EditSessionClosed, InconsistentPermissionSet, InvalidTenant,
    ReservedRoleName, RoleNotFound, SaveInProgress,
)
from portal.constants.roles import RESERVED_ROLE_NAMES, TENANT_ASSIGNABLE_SYSTEM_ROLES
from portal.models.authz import ROLE_KIND_SYSTEM, ROLE_KIND_TENANT
from portal.services.closure import ClosureResolver

log = logging.getLogger(__name__)

DEFAULT_TENANT_PATTERN = r'^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$'


@dataclass(frozen=True)
class RoleRecord:
    id: Optional[int]
    name: str
    kind: str = ROLE_KIND_TENANT
    tenant_id: Optional[str] = None
    permissions: FrozenSet[str] = frozenset()
    description: Optional[str] = None

    @property
    def is_system(self) -> bool:
        return self.kind == ROLE_KIND_SYSTEM and self.tenant_id is None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'kind': self.kind,
            'tenant_id': self.tenant_id,
            'permissions': sorted(self.permissions),
        }


@dataclass(frozen=True)
class RoleCreate:
    name: str
    kind: str
    tenant_id: Optional[str]
    permissions: FrozenSet[str] = frozenset()
    description: Optional[str] = None


@dataclass(frozen=True)
class RoleUpdate:
    """Fields a save may change; tenant and kind are never updated."""
    name: str
    permissions: FrozenSet[str] = frozenset()
    description: Optional[str] = None


class RoleRepository(Protocol):
    def get(self, role_id: int) -> Optional[RoleRecord]: ...

    def list(self, tenant_id: Optional[str] = None, include_system: bool = True,
             kind: Optional[str] = None) -> List[RoleRecord]: ...

    def find_by_name(self, name: str, tenant_id: Optional[str]) -> Optional[RoleRecord]: ...

    def update(self, role_id: int, changes: RoleUpdate) -> RoleRecord: ...

    def create(self, data: RoleCreate) -> RoleRecord: ...


class RoleManager:
    def __init__(self, repository: RoleRepository, resolver: ClosureResolver,
                 tenant_pattern: str = DEFAULT_TENANT_PATTERN):
        self.repository = repository
        self.resolver = resolver
        self._tenant_re = re.compile(tenant_pattern)

    # --- visibility ---
    @staticmethod
    def can_view(principal, role: RoleRecord) -> bool:
        if role.tenant_id is None:
            return role.kind == ROLE_KIND_SYSTEM
        return principal.tenant_id is not None and role.tenant_id == principal.tenant_id

    @classmethod
    def can_assign(cls, principal, role: RoleRecord) -> bool:
        """Whether the principal may give this role to a user.

        Platform principals assign any SYSTEM role. Tenant principals assign
        their own tenant's roles and only the tenant-level SYSTEM presets.
        """
        if not cls.can_view(principal, role):
            return False
        if principal.tenant_id is None or not role.is_system:
            return True
        return role.name in TENANT_ASSIGNABLE_SYSTEM_ROLES

    def visible_roles(self, principal, kind: Optional[str] = None) -> List[RoleRecord]:
        rows = self.repository.list(tenant_id=principal.tenant_id, include_system=True, kind=kind)
        return [r for r in rows if self.can_view(principal, r)]

    def _deny(self, principal, role: RoleRecord, op: str):
        log.warning(
            'role.%s denied user=%s principal_tenant=%s role=%s role_tenant=%s',
            op, principal.user_id, principal.tenant_id, role.id, role.tenant_id,
        )
        raise AccessDenied(f'Role {role.id} is not accessible from this tenant')

    # --- editing ---
    def load_for_editing(self, principal, role_id: int) -> RoleRecord:
        role = self.repository.get(role_id)
        if role is None:
            raise RoleNotFound(role_id)
        if not self.can_view(principal, role):
            self._deny(principal, role, 'load')
        return replace(role, permissions=self.resolver.normalize(role.permissions))

    def apply_permission_edit(self, role: RoleRecord, permission: str, turn_on: bool) -> RoleRecord:
        return replace(role, permissions=self.resolver.apply(role.permissions, permission, turn_on))

    def toggle_permission(self, role: RoleRecord, permission: str) -> RoleRecord:
        return replace(role, permissions=self.resolver.toggle(role.permissions, permission))

    def validate_tenant(self, kind: str, tenant_id: Optional[str]) -> None:
        if tenant_id is not None and not (isinstance(tenant_id, str) and self._tenant_re.match(tenant_id)):
            raise InvalidTenant(f'Invalid tenant reference: {tenant_id!r}')
        if kind == ROLE_KIND_TENANT and tenant_id is None:
            raise InvalidTenant('Tenant roles require a tenant')
        if kind == ROLE_KIND_SYSTEM and tenant_id is not None:
            raise InvalidTenant('System roles cannot belong to a tenant')
        if kind not in (ROLE_KIND_SYSTEM, ROLE_KIND_TENANT):
            raise InvalidTenant(f'Unknown role kind: {kind!r}')

    def _validate_permissions(self, permissions: Iterable[str]) -> FrozenSet[str]:
        perms = self.resolver.catalog.require(self.resolver.coerce(permissions))
        bad = self.resolver.violations(perms)
        if bad:
            raise InconsistentPermissionSet(bad)
        return perms

    @staticmethod
    def _clean_name(name, tenant_id: Optional[str]) -> str:
        if name is None:
            name = ''
        if not isinstance(name, str):
            raise ValueError('name must be a string')
        name = name.strip()
        if not name:
            raise ValueError('name required')
        if tenant_id is not None and name.casefold() in RESERVED_ROLE_NAMES:
            raise ReservedRoleName(name)
        return name

    def _ensure_unique(self, name: str, tenant_id: Optional[str], role_id: Optional[int] = None):
        clash = self.repository.find_by_name(name, tenant_id)
        if clash is not None and clash.id != role_id:
            raise DuplicateRoleName(name)

    def save(self, principal, role: RoleRecord) -> RoleRecord:
        if role.id is None:
            raise RoleNotFound(None)
        if not self.can_view(principal, role):
            self._deny(principal, role, 'save')
        stored = self.repository.get(role.id)
        if stored is None:
            raise RoleNotFound(role.id)
        if not self.can_view(principal, stored):
            self._deny(principal, stored, 'save')
        self.validate_tenant(role.kind, role.tenant_id)
        if role.tenant_id != stored.tenant_id or role.kind != stored.kind:
            log.warning(
                'role.save tenant change rejected user=%s role=%s stored=%s/%s submitted=%s/%s',
                principal.user_id, role.id, stored.kind, stored.tenant_id, role.kind, role.tenant_id,
            )
            raise InvalidTenant('Changing the tenant or kind of a role is not supported')
        name = self._clean_name(role.name, stored.tenant_id)
        perms = self._validate_permissions(role.permissions)
        self._ensure_unique(name, stored.tenant_id, stored.id)
        return self.repository.update(stored.id, RoleUpdate(name=name, permissions=perms, description=role.description))

    def create(self, principal, name: str, permissions: Iterable[str] = (), description: Optional[str] = None) -> RoleRecord:
        """Create a role owned by the principal's scope.

        Tenant principals get a TENANT role fixed to their tenant; platform
        principals get a SYSTEM role. The requested permissions are closed by
        replaying each one through the resolver.
        """
        kind = ROLE_KIND_SYSTEM if principal.tenant_id is None else ROLE_KIND_TENANT
        self.validate_tenant(kind, principal.tenant_id)
        name = self._clean_name(name, principal.tenant_id)
        requested = self.resolver.catalog.require(self.resolver.coerce(permissions))
        perms = self.resolver.close_requested(requested)
        self._ensure_unique(name, principal.tenant_id)
        return self.repository.create(RoleCreate(
            name=name, kind=kind, tenant_id=principal.tenant_id, permissions=perms, description=description,
        ))


@dataclass
class _SessionState:
    draft: RoleRecord
    revision: int = 0
    closed: bool = False
    saving: bool = False
    last_saved: Optional[RoleRecord] = field(default=None)


class RoleEditSession:
    """One administrator editing one role.

    Only one ``save`` may be in flight; a second call while it runs raises
    SaveInProgress. A save result is applied to the draft only if the session is
    still open and the draft was not edited while the save was running.
    """

    def __init__(self, manager: RoleManager, principal, role_id: int):
        self.manager = manager
        self.principal = principal
        self.role_id = role_id
        self._save_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = _SessionState(draft=manager.load_for_editing(principal, role_id))

    @property
    def draft(self) -> RoleRecord:
        with self._state_lock:
            return self._state.draft

    @property
    def closed(self) -> bool:
        return self._state.closed

    @property
    def saving(self) -> bool:
        with self._state_lock:
            return self._state.saving

    @property
    def last_saved(self) -> Optional[RoleRecord]:
        return self._state.last_saved

    def _edit(self, fn) -> RoleRecord:
        with self._state_lock:
            if self._state.closed:
                raise EditSessionClosed('Edit session is closed')
            self._state.draft = fn(self._state.draft)
            self._state.revision += 1
            return self._state.draft

    def set_permission(self, permission: str, turn_on: bool) -> RoleRecord:
        return self._edit(lambda d: self.manager.apply_permission_edit(d, permission, turn_on))

    def toggle(self, permission: str) -> RoleRecord:
        return self._edit(lambda d: self.manager.toggle_permission(d, permission))

    def rename(self, name: str, description: Optional[str] = None) -> RoleRecord:
        return self._edit(lambda d: replace(d, name=name, description=description if description is not None else d.description))

    def save(self) -> RoleRecord:
        if not self._save_lock.acquire(blocking=False):
            log.info('role.save rejected: save already in flight role=%s', self.role_id)
            raise SaveInProgress(f'A save for role {self.role_id} is already in progress')
        try:
            with self._state_lock:
                if self._state.closed:
                    raise EditSessionClosed('Edit session is closed')
                draft = self._state.draft
                revision = self._state.revision
                self._state.saving = True
            saved = self.manager.save(self.principal, draft)
            with self._state_lock:
                self._state.saving = False
                if self._state.closed or self._state.revision != revision:
                    log.info('role.save response discarded role=%s (session moved on)', self.role_id)
                    return saved
                self._state.draft = saved
                self._state.last_saved = saved
            return saved
        finally:
            with self._state_lock:
                self._state.saving = False
            self._save_lock.release()

    def close(self) -> None:
        with self._state_lock:
            self._state.closed = True
            self._state.revision += 1


__all__ = [
    'RoleRecord', 'RoleCreate', 'RoleUpdate', 'RoleRepository', 'RoleManager', 'RoleEditSession',
    'DEFAULT_TENANT_PATTERN',
]
