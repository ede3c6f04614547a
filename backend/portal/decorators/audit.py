from __future__ import annotations
"""Audit logging decorator for role and assignment endpoints.

Usage examples:

@audit_log('ROLE.CREATE', entity='Role', entity_id_key='id', meta_keys=['name', 'kind', 'tenant_id'])
def create_role():
    ... return role.to_dict(), 201

@audit_log('ROLE.UPDATE', entity='Role', entity_id_key='id',
           diff_keys=['name', 'permissions'], pre_fetch=lambda a, kw: _snapshot(kw['role_id']))
def update_role(role_id): ...

Parameters:
  action: required audit action code (e.g. ROLE.UPDATE)
  entity: optional entity label (Role, User)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: view keyword argument to use for entity_id when entity_id_key is absent.
  meta_keys: keys projected from the returned JSON into meta.
  meta_builder: callable returning a meta dict; receives (data, original_return_value, args, kwargs).
  diff_keys / pre_fetch: snapshot taken before the view runs; changed keys land in meta['changes'].

Only successful responses (status < 400) are audited. Errors raised by the view
propagate untouched.
"""

import logging
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from portal import get_db
from portal.services.audit import add_audit

log = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return (data, status) for the usual Flask return shapes."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def _diff(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    changes = {}
    for k in keys:
        if k in before and k in after and before[k] != after[k]:
            changes[k] = {'before': before[k], 'after': after[k]}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    commit: bool = True,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data, status = _extract_payload(rv)
            if status >= 400:
                return rv
            if not isinstance(data, dict):
                add_audit(action, entity, kwargs.get(entity_id_arg) if entity_id_arg else None, None)
            else:
                entity_id = None
                if entity_id_key and entity_id_key in data:
                    entity_id = data.get(entity_id_key)
                elif entity_id_arg and entity_id_arg in kwargs:
                    entity_id = kwargs.get(entity_id_arg)
                if meta_builder:
                    meta = meta_builder(data, rv, args, kwargs)
                elif meta_keys:
                    meta = {k: data.get(k) for k in meta_keys if k in data}
                else:
                    meta = None
                if diff_keys and isinstance(before, dict):
                    changes = _diff(before, data, diff_keys)
                    if changes:
                        meta = dict(meta or {})
                        meta['changes'] = changes
                add_audit(action, entity, entity_id, meta)
            if commit:
                get_db().commit()
            log.info('audit.%s entity=%s', action, entity)
            return rv
        return wrapper
    return outer
