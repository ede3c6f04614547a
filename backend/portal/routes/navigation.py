from flask import Blueprint, request, abort
from flask_jwt_extended import jwt_required, verify_jwt_in_request, get_jwt_identity
from portal import get_db, get_authorizer
from portal.services.audit import add_audit
from portal.services.policy import current_principal
from portal.services.routing import DENIED_FORBIDDEN, DENIED_NOT_FOUND
from portal.sitemap.navigation import NAVIGATION_TREE, filter_navigation

nav_bp = Blueprint('nav', __name__)

_AUDITED_DENIALS = {
    DENIED_FORBIDDEN: 'ROUTE.DENIED',
    DENIED_NOT_FOUND: 'ROUTE.NOT_FOUND',
}


def _optional_principal():
    verify_jwt_in_request(optional=True)
    if get_jwt_identity() is None:
        return None
    return current_principal()


@nav_bp.get('/routes')
@jwt_required()
def accessible_routes():
    routes = get_authorizer().accessible_routes(current_principal())
    return {'data': [r.to_dict() for r in routes], 'total': len(routes)}


@nav_bp.get('/menu')
@jwt_required()
def menu():
    principal = current_principal()
    tree = filter_navigation(NAVIGATION_TREE, principal, get_authorizer())
    return {'data': [entry.to_dict() for entry in tree]}


@nav_bp.get('/home')
@jwt_required()
def home():
    return {'path': get_authorizer().home_path(current_principal())}


@nav_bp.get('/authorize')
def authorize_path():
    """Route guard check for a client-side navigation.

    Always answers 200; a denial carries the redirect target instead of an
    error status.
    """
    path = request.args.get('path')
    if not path:
        abort(400, description='path required')
    principal = _optional_principal()
    decision = get_authorizer().authorize(principal, path)
    if decision:
        return {
            'allowed': True,
            'path': path,
            'route': decision.route.key,
            'portal': decision.route.portal,
            'params': dict(decision.params),
        }
    action = _AUDITED_DENIALS.get(decision.reason)
    if action and principal is not None:
        add_audit(action, 'Route', decision.path, {
            'route': decision.route.key if decision.route else None,
            'reason': decision.reason,
        }, principal=principal)
        get_db().commit()
    return {
        'allowed': False,
        'path': decision.path,
        'route': decision.route.key if decision.route else None,
        'reason': decision.reason,
        'redirect_to': decision.redirect_to,
    }
