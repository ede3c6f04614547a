"""Error taxonomy for the permission model and route authorization engine.

Every error carries an HTTP status so the application error handler can render
it in the standard JSON envelope without a lookup table.
"""
from __future__ import annotations
from typing import Optional


class PortalError(Exception):
    status = 500
    title = 'Internal Server Error'

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.title)
        self.detail = detail or self.title


class UnknownPermission(PortalError):
    """A permission name that is not part of the loaded catalog (caller bug)."""
    status = 400
    title = 'Unknown Permission'

    def __init__(self, name: str):
        super().__init__(f'Unknown permission: {name}')
        self.name = name


class InconsistentPermissionSet(PortalError):
    status = 400
    title = 'Inconsistent Permission Set'

    def __init__(self, resources):
        self.resources = sorted(resources)
        super().__init__(f'Permission set is not closed for: {self.resources}')


class AccessDenied(PortalError):
    status = 403
    title = 'Forbidden'


class InvalidTenant(PortalError):
    status = 400
    title = 'Invalid Tenant'


class RoleNotFound(PortalError):
    status = 404
    title = 'Not Found'

    def __init__(self, role_id):
        super().__init__(f'Role {role_id} not found')
        self.role_id = role_id


class RouteNotFound(PortalError):
    status = 404
    title = 'Not Found'

    def __init__(self, path: str):
        super().__init__(f'No route matches {path}')
        self.path = path


class SaveInProgress(PortalError):
    status = 409
    title = 'Conflict'


class EditSessionClosed(PortalError):
    """The edit session was closed; the caller must load the role again."""
    status = 409
    title = 'Conflict'


class DuplicateRoleName(PortalError):
    status = 400
    title = 'Duplicate Role'

    def __init__(self, name: str):
        super().__init__(f'Role name already in use: {name}')
        self.name = name


class RouteTableError(ValueError):
    """Raised while building a route table; a startup error, never a request error."""


class ReservedRoleName(PortalError):
    """A tenant role may not take the name of a built-in role."""
    status = 400
    title = 'Reserved Role Name'

    def __init__(self, name: str):
        super().__init__(f'Role name {name} is reserved for system roles')
        self.name = name


__all__ = [
    'PortalError', 'UnknownPermission', 'InconsistentPermissionSet', 'AccessDenied',
    'InvalidTenant', 'RoleNotFound', 'RouteNotFound', 'SaveInProgress', 'EditSessionClosed',
    'DuplicateRoleName', 'ReservedRoleName', 'RouteTableError',
]
