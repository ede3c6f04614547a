"""Catch-all pages every authenticated user may open."""
from portal.services.routing import route

_PLAIN = {'pageBackgroundType': 'plain', 'pageContainerType': 'contained'}

HOME_ROUTE = route('home', '/home', 'Home')

OTHER_ROUTES = [
    route('accessDenied', '/access-denied', 'others/AccessDenied', meta=_PLAIN),
    route('maintenance', '/maintenance', 'others/MaintenancePage', meta={**_PLAIN, 'layout': 'blank'}),
    route('roleDebugger', '/debug/roles', 'debug/RoleDebugger', meta=_PLAIN),
]
