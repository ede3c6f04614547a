from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request
from portal.services.policy import current_principal
from portal.services.routing import has_authority


def require_authority(*authority: str):
    """Admit the request if the token holds ANY of ``authority`` as a role name or permission.

    With no arguments any authenticated principal passes.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not has_authority(current_principal(), authority):
                abort(403, description='Missing authority')
            return fn(*args, **kwargs)
        return wrapper
    return outer
