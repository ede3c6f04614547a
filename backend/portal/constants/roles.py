"""Role names referenced by route authority lists and role presets."""

CS_ADMIN = 'CS-Admin'
CS_USER = 'CS-User'
TENANT_ADMIN = 'Tenant-Admin'
END_USER = 'End-User'

# Legacy names still present on older accounts
ADMIN = 'admin'
USER = 'user'

ALL_ROLES = [ADMIN, USER, CS_ADMIN, CS_USER, TENANT_ADMIN, END_USER]

LEGACY_ALIASES = {
    ADMIN: CS_ADMIN,
    USER: CS_USER,
}

# Highest first; used to pick a landing page
ROLE_PRECEDENCE = [CS_ADMIN, CS_USER, TENANT_ADMIN, END_USER]

ROLE_HOME_PATHS = {
    CS_ADMIN: '/tenantportal/dashboard',
    CS_USER: '/admin/dashboard',
    TENANT_ADMIN: '/app/tenant-dashboard',
    END_USER: '/app/tenant-dashboard',
}

DEFAULT_HOME_PATH = '/home'

# SYSTEM roles a tenant administrator may hand to users of its own tenant
TENANT_ASSIGNABLE_SYSTEM_ROLES = (TENANT_ADMIN, END_USER)

# Tenant roles may not shadow these names in route authority checks
RESERVED_ROLE_NAMES = frozenset(name.casefold() for name in ALL_ROLES)
