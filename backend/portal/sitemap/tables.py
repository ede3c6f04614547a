"""Assembles the application route table from the portal groups.

Group order is significant: the first matching path wins.
"""
from portal.services.routing import PUBLIC_PORTAL, RouteTable, RouteTableBuilder

from .app_routes import APP_ROUTES
from .customer_portal import CUSTOMER_PORTAL_ROUTES
from .others import HOME_ROUTE, OTHER_ROUTES
from .platform_admin import PLATFORM_ADMIN_ROUTES
from .public import PUBLIC_ROUTES
from .tenant_portal import TENANT_PORTAL_ROUTES

PORTAL_GROUPS = [
    (PUBLIC_PORTAL, PUBLIC_ROUTES),
    ('home', [HOME_ROUTE]),
    ('tenant_portal', TENANT_PORTAL_ROUTES),
    ('customer_portal', CUSTOMER_PORTAL_ROUTES),
    ('platform_admin', PLATFORM_ADMIN_ROUTES),
    ('app', APP_ROUTES),
    ('others', OTHER_ROUTES),
]


def build_route_table(groups=None) -> RouteTable:
    builder = RouteTableBuilder()
    for portal, routes in groups or PORTAL_GROUPS:
        builder.add_group(portal, routes)
    return builder.build()
