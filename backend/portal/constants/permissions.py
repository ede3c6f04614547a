"""Central definitions of the permission vocabulary and role presets.

Permission names follow ``<resource>.<action>``. Extend cautiously; never rename
a name silently, add a new one and migrate role rows instead.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from .roles import CS_ADMIN, CS_USER, TENANT_ADMIN, END_USER

# category -> resource -> actions
PERMISSION_CATALOG: Dict[str, Dict[str, List[str]]] = {
    'User Management': {
        'users': ['all', 'read', 'write'],
        'roles': ['all', 'read', 'write'],
    },
    'Customer Management': {
        'customers': ['all', 'read', 'write'],
        'workspaces': ['all', 'read', 'write'],
    },
    'Shop Management': {
        'shops': ['all', 'read', 'write'],
        'shopkpi': ['all', 'read', 'write'],
    },
    'Reports': {
        'report': ['all', 'read', 'write', 'launch', 'approve'],
        'reportcategory': ['all', 'read', 'write'],
    },
    'Programs': {
        'programs': ['all', 'read', 'write'],
    },
    'Accounting': {
        'accounting': ['all', 'read', 'write', 'upload'],
    },
    'Parts Management': {
        'manufacturer': ['all', 'read', 'write'],
        'brand': ['all', 'read', 'write'],
        'suppliers': ['all', 'read', 'write'],
        'masterparts': ['all', 'read', 'write'],
    },
    'System': {
        'system': ['all', 'logs', 'settings'],
    },
}

# (aggregate, (child_a, child_b)) applied to every resource without an override
DEFAULT_DECOMPOSITION: Tuple[str, Tuple[str, str]] = ('all', ('read', 'write'))

DECOMPOSITION_OVERRIDES: Dict[str, Tuple[str, Tuple[str, str]]] = {
    'system': ('all', ('logs', 'settings')),
}


def build_all_permission_names() -> List[str]:
    names: List[str] = []
    for resources in PERMISSION_CATALOG.values():
        for resource, actions in resources.items():
            for action in actions:
                names.append(f'{resource}.{action}')
    return names


def iter_catalog_rows():
    """Yield ``(name, category)`` pairs in declaration order."""
    for category, resources in PERMISSION_CATALOG.items():
        for resource, actions in resources.items():
            for action in actions:
                yield f'{resource}.{action}', category


ALL_PERMISSION_NAMES = build_all_permission_names()

# SYSTEM role -> requested permissions; '*' means every catalog permission.
# Seeding replays each entry through the closure resolver, so an aggregate
# listed here brings its children along.
ROLE_PRESETS: Dict[str, List[str]] = {
    CS_ADMIN: ['*'],
    CS_USER: [
        'customers.all', 'workspaces.all', 'programs.read', 'report.read',
        'manufacturer.all', 'brand.all', 'suppliers.all', 'masterparts.all',
    ],
    TENANT_ADMIN: [
        'users.all', 'roles.all', 'shops.all', 'shopkpi.all',
        'report.all', 'report.launch', 'report.approve', 'reportcategory.all',
        'programs.all', 'accounting.all', 'accounting.upload', 'workspaces.all',
        'system.settings',
    ],
    END_USER: ['shops.read', 'shopkpi.read', 'report.read', 'report.launch', 'programs.read'],
}
