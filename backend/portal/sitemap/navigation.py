"""Side navigation tree and its per-principal filtering.

An entry is shown only when its own authority passes and, for entries with a
path, the route that path resolves to is authorized as well. Collapsible
groups left without visible children are dropped.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from portal.constants.roles import CS_ADMIN, CS_USER, END_USER, TENANT_ADMIN
from portal.services.routing import RouteAuthorizer, has_authority

NAV_ITEM_TYPE_TITLE = 'title'
NAV_ITEM_TYPE_COLLAPSE = 'collapse'
NAV_ITEM_TYPE_ITEM = 'item'


@dataclass(frozen=True)
class NavItem:
    key: str
    title: str
    path: str = ''
    type: str = NAV_ITEM_TYPE_ITEM
    authority: Tuple[str, ...] = ()
    icon: Optional[str] = None
    sub_menu: Tuple['NavItem', ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'title': self.title,
            'path': self.path,
            'type': self.type,
            'icon': self.icon,
            'authority': list(self.authority),
            'subMenu': [c.to_dict() for c in self.sub_menu],
        }


def item(key, title, path, authority=(), icon=None) -> NavItem:
    return NavItem(key=key, title=title, path=path, authority=tuple(authority), icon=icon)


def collapse(key, title, children, authority=(), icon=None) -> NavItem:
    return NavItem(key=key, title=title, type=NAV_ITEM_TYPE_COLLAPSE, authority=tuple(authority),
                   icon=icon, sub_menu=tuple(children))


_CS = (CS_ADMIN, CS_USER)
_TENANT = (TENANT_ADMIN, END_USER)


def _parts(resource):
    return (CS_ADMIN, CS_USER, TENANT_ADMIN, END_USER, f'{resource}.all', f'{resource}.read')


NAVIGATION_TREE: Tuple[NavItem, ...] = (
    item('home', 'Home', '/app/tenant-dashboard', icon='home'),
    collapse('tenantportal', 'Portal Administration', [
        item('tenantportal.dashboard', 'Dashboard', '/tenantportal/dashboard', [CS_ADMIN], 'dashboard'),
        item('tenantportal.users', 'User Management', '/tenantportal/users', [CS_ADMIN], 'users'),
        item('tenantportal.customers', 'Customer Management', '/admin/customers', _CS, 'customer'),
        item('tenantportal.roles', 'Role Management', '/tenantportal/roles', [CS_ADMIN], 'role'),
        item('tenantportal.workspaces', 'Workspaces', '/tenantportal/workspaces', _CS, 'workspace'),
        collapse('tenantportal.shopAttributes', 'Shop Attributes', [
            item('tenantportal.shopAttributes.attributes', 'Attributes', '/admin/shop-attributes', _CS),
            item('tenantportal.shopAttributes.categories', 'Categories', '/admin/attribute-categories', _CS),
            item('tenantportal.shopAttributes.units', 'Units', '/admin/attribute-units', _CS),
        ], _CS, 'shop'),
        collapse('tenantportal.partsManagement', 'Parts Management', [
            item('tenantportal.partsManagement.manufacturers', 'Manufacturers', '/parts-management/manufacturers', _parts('manufacturer')),
            item('tenantportal.partsManagement.brands', 'Brands', '/parts-management/brands', _parts('brand')),
            item('tenantportal.partsManagement.suppliers', 'Suppliers', '/parts-management/suppliers', _parts('suppliers')),
            item('tenantportal.partsManagement.masterParts', 'Master Parts', '/parts-management/master-parts', _parts('masterparts')),
        ], _CS, 'parts'),
        item('tenantportal.programs', 'Programs', '/tenantportal/programs', _CS, 'program'),
    ], _CS, 'setting'),
    collapse('adminMenu', 'Administration', [
        item('adminMenu.users', 'Users', '/tenantportal/tenant/users', [TENANT_ADMIN]),
        item('adminMenu.roles', 'Roles', '/tenantportal/tenant/roles', [TENANT_ADMIN]),
        item('adminMenu.workspaces', 'Workspaces', '/tenantportal/tenant/workspaces', [TENANT_ADMIN]),
        item('adminMenu.reportCategories', 'Report Categories', '/tenantportal/tenant/report-categories', [TENANT_ADMIN]),
        item('adminMenu.reports', 'Reports', '/tenantportal/tenant/reports', [TENANT_ADMIN]),
        item('adminMenu.shops', 'Shops', '/admin/shops', [TENANT_ADMIN]),
        item('adminMenu.programs', 'Programs', '/app/programs', [TENANT_ADMIN]),
    ], [TENANT_ADMIN], 'admin'),
    item('tenantDashboard', 'Dashboard', '/app/tenant-dashboard', _TENANT, 'dashboard'),
    collapse('shopKPI', 'Shop KPI', [
        item('shopKPI.shopProperties', 'Shop Properties', '/app/shop-properties', _TENANT + ('shops.read',)),
        item('shopKPI.shopKpi', 'Shop KPI', '/app/shop-kpi', _TENANT + ('shopkpi.read',)),
    ], _TENANT + ('shops.read', 'shopkpi.read'), 'kpi'),
    collapse('partsManagement', 'Parts Management', [
        item('partsManagement.manufacturers', 'Manufacturers', '/parts-management/manufacturers', _parts('manufacturer')),
        item('partsManagement.brands', 'Brands', '/parts-management/brands', _parts('brand')),
        item('partsManagement.suppliers', 'Suppliers', '/parts-management/suppliers', _parts('suppliers')),
        item('partsManagement.masterParts', 'Master Parts', '/parts-management/master-parts', _parts('masterparts')),
    ], _TENANT, 'parts'),
    collapse('accounting', 'Accounting', [
        item('accounting.masterChartOfAccount', 'Master Chart of Account', '/tenantportal/accounting/master-chart-of-account', [TENANT_ADMIN]),
        item('accounting.chartOfAccounts', 'Chart of Accounts', '/accounting/chart-of-accounts', _TENANT),
        item('accounting.shopChartOfAccount', 'Shop Chart of Account', '/accounting/shop-chart-of-account', _TENANT),
        item('accounting.uploadGL', 'Upload GL', '/accounting/upload-gl', _TENANT),
    ], _TENANT, 'accounting'),
    item('subscriptions', 'Subscriptions', '/subscriptions', _TENANT, 'subscription'),
    item('reports', 'Reports', '/reports', _TENANT + ('report.read', 'report.all'), 'report'),
    item('activityLog', 'Activity Log', '/app/activity-log', ['system.logs'], 'log'),
)


def _visible(entry: NavItem, principal, authorizer: RouteAuthorizer) -> bool:
    if not has_authority(principal, entry.authority):
        return False
    if not entry.path:
        return True
    target = authorizer.match_route(entry.path)
    return target is not None and authorizer.is_authorized(principal, target)


def filter_navigation(tree, principal, authorizer: RouteAuthorizer) -> List[NavItem]:
    """Return the subset of ``tree`` the principal may open, preserving order."""
    if principal is None:
        return []
    out: List[NavItem] = []
    for entry in tree:
        if not _visible(entry, principal, authorizer):
            continue
        if entry.type == NAV_ITEM_TYPE_ITEM:
            out.append(entry)
            continue
        children = filter_navigation(entry.sub_menu, principal, authorizer)
        if children:
            out.append(NavItem(
                key=entry.key, title=entry.title, path=entry.path, type=entry.type,
                authority=entry.authority, icon=entry.icon, sub_menu=tuple(children),
            ))
    return out


def navigation_paths(tree) -> List[str]:
    """Every path in ``tree``, depth first."""
    paths: List[str] = []
    for entry in tree:
        if entry.path:
            paths.append(entry.path)
        paths.extend(navigation_paths(entry.sub_menu))
    return paths
