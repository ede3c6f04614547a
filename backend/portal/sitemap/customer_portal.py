"""CS-User portal."""
from portal.constants.roles import CS_USER
from portal.services.routing import route

CUSTOMER_PORTAL_ROUTES = [
    route('admin.dashboard', '/admin/dashboard', 'admin/dashboard/CSUserDashboard', [CS_USER],
          meta={'header': {'title': 'Dashboard'}}),
]
