from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt
from portal import get_db
from portal.models.audit import AuditLog
from portal.services.policy import principal_from_claims

log = logging.getLogger(__name__)


def _request_claims() -> Dict[str, Any]:
    from flask import has_request_context
    if not has_request_context():
        return {}
    try:
        return get_jwt() or {}
    except RuntimeError:
        # no verified token on this request (anonymous route check)
        return {}


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None,
              meta: Optional[Dict[str, Any]] = None, principal=None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. ROLE.CREATE, ROLE.UPDATE, USER.ROLES.SET, ROUTE.DENIED
      entity: optional entity name (Role, User, Route)
      entity_id: optional primary key or path string
      meta: additional JSON-safe dictionary (shallow copied)
      principal: acting principal; read from the request token when omitted
    """
    if principal is None:
        claims = _request_claims()
        principal = principal_from_claims(claims) if claims else None
    entry = AuditLog(
        actor_user_id=(principal.user_id if principal and principal.user_id is not None else 0),
        actor_tenant_id=principal.tenant_id if principal else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        perms_snapshot={'perms': sorted(principal.permissions) if principal else []},
        meta=dict(meta or {}),
    )
    get_db().add(entry)
    log.debug('audit %s %s:%s', action, entity, entity_id)
    # No commit here; caller's transaction boundary controls durability.
    return entry
