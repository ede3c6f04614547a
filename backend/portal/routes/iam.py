from flask import Blueprint, request, abort, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select, delete, func
from portal.models.authz import User, UserRole, ROLE_KIND_SYSTEM, ROLE_KIND_TENANT
from portal.models.audit import AuditLog
from portal import get_db, get_authorizer, get_decomposition_rules
from portal.constants.roles import CS_ADMIN, TENANT_ADMIN
from portal.config.pagination import normalize_pagination, page_payload
from portal.decorators.audit import audit_log
from portal.decorators.auth import require_authority
from portal.errors import AccessDenied
from portal.services.catalog import load_catalog
from portal.services.closure import ClosureResolver
from portal.services.policy import current_principal, load_principal, principal_claims
from portal.services.role_store import SqlRoleRepository
from portal.services.roles import RoleManager, RoleRecord

iam_bp = Blueprint('iam', __name__)

ROLE_READERS = (CS_ADMIN, TENANT_ADMIN, 'roles.read')
ROLE_EDITORS = (CS_ADMIN, TENANT_ADMIN, 'roles.write')
USER_EDITORS = (CS_ADMIN, TENANT_ADMIN, 'users.write')


def _resolver(session=None):
    return ClosureResolver(load_catalog(session or get_db()), get_decomposition_rules())


def _manager():
    session = get_db()
    return RoleManager(SqlRoleRepository(session), _resolver(session), current_app.config['TENANT_ID_PATTERN'])


def _pagination():
    try:
        return normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))


def _permission_list(raw):
    if raw is not None and not isinstance(raw, (list, str)):
        abort(400, description='permissions must be a list of names')
    return ClosureResolver.coerce(raw)


# --- Permission catalog ---

@iam_bp.get('/permissions')
@require_authority(*ROLE_READERS)
def list_permissions():
    catalog = load_catalog(get_db())
    return {
        'data': [
            {'name': p.name, 'category': p.category, 'resource': p.resource, 'action': p.action, 'description': p.description}
            for p in catalog.list_all()
        ],
        'total': len(catalog),
    }


@iam_bp.get('/permissions/grouped')
@require_authority(*ROLE_READERS)
def grouped_permissions():
    catalog = load_catalog(get_db())
    rules = get_decomposition_rules()
    grouped = catalog.grouped(rules.aggregate_for)
    return {
        'data': [
            {
                'category': category,
                'resources': [
                    {
                        'resource': resource,
                        'aggregate': f'{resource}.{rules.aggregate_for(resource)}',
                        'permissions': [p.name for p in perms],
                    }
                    for resource, perms in resources.items()
                ],
            }
            for category, resources in grouped.items()
        ]
    }


# --- Roles ---

@iam_bp.get('/roles')
@require_authority(*ROLE_READERS)
def list_roles():
    kind = request.args.get('kind')
    if kind and kind not in (ROLE_KIND_SYSTEM, ROLE_KIND_TENANT):
        abort(400, description='kind must be SYSTEM or TENANT')
    limit, offset = _pagination()
    roles = _manager().visible_roles(current_principal(), kind=kind)
    rows = [r.to_dict() for r in roles[offset:offset + limit]]
    return page_payload(rows, len(roles), limit, offset)


@iam_bp.get('/roles/<int:role_id>')
@require_authority(*ROLE_READERS)
def get_role(role_id: int):
    return _manager().load_for_editing(current_principal(), role_id).to_dict()


@iam_bp.post('/roles')
@require_authority(*ROLE_EDITORS)
@audit_log('ROLE.CREATE', entity='Role', entity_id_key='id', meta_keys=['name', 'kind', 'tenant_id', 'permissions'])
def create_role():
    data = request.json or {}
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        abort(400, description='name required')
    role = _manager().create(
        current_principal(),
        name=name,
        permissions=_permission_list(data.get('permissions')),
        description=data.get('description'),
    )
    return role.to_dict(), 201


def _role_snapshot(role_id):  # pre_fetch for the update audit diff
    role = SqlRoleRepository(get_db()).get(role_id)
    return role.to_dict() if role else {}


@iam_bp.put('/roles/<int:role_id>')
@require_authority(*ROLE_EDITORS)
@audit_log(
    'ROLE.UPDATE',
    entity='Role',
    entity_id_key='id',
    meta_keys=['name'],
    diff_keys=['name', 'description', 'permissions'],
    pre_fetch=lambda a, kw: _role_snapshot(kw.get('role_id')),
)
def update_role(role_id: int):
    data = request.json or {}
    if 'name' in data and not isinstance(data['name'], str):
        abort(400, description='name must be a string')
    principal = current_principal()
    manager = _manager()
    loaded = manager.load_for_editing(principal, role_id)
    submitted = RoleRecord(
        id=role_id,
        name=data.get('name', loaded.name),
        description=data.get('description', loaded.description),
        kind=data.get('kind', loaded.kind),
        tenant_id=data.get('tenant_id', loaded.tenant_id),
        permissions=_permission_list(data['permissions']) if 'permissions' in data else loaded.permissions,
    )
    try:
        saved = manager.save(principal, submitted)
    except ValueError as e:
        abort(400, description=str(e))
    return saved.to_dict()


@iam_bp.post('/roles/<int:role_id>/permissions/toggle')
@require_authority(*ROLE_EDITORS)
def toggle_role_permission(role_id: int):
    """Resolve one checkbox edit against the client's draft; nothing is stored."""
    data = request.json or {}
    permission = data.get('permission')
    if not permission or not isinstance(permission, str):
        abort(400, description='permission required')
    manager = _manager()
    role = manager.load_for_editing(current_principal(), role_id)
    if 'permissions' in data:
        role = RoleRecord(
            id=role.id, name=role.name, kind=role.kind, tenant_id=role.tenant_id,
            description=role.description, permissions=_permission_list(data['permissions']),
        )
    turn_on = data.get('turn_on')
    if turn_on is None:
        role = manager.toggle_permission(role, permission)
    else:
        role = manager.apply_permission_edit(role, permission, bool(turn_on))
    return {
        'id': role.id,
        'permissions': sorted(role.permissions),
        'closed': manager.resolver.is_closed(role.permissions),
    }


# --- Assignments ---

@iam_bp.put('/users/<int:user_id>/roles')
@require_authority(*USER_EDITORS)
@audit_log('USER.ROLES.SET', entity='User', entity_id_key='user_id', meta_keys=['role_ids'])
def set_user_roles(user_id: int):
    session = get_db()
    principal = current_principal()
    user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    if principal.tenant_id is not None and user.tenant_id != principal.tenant_id:
        raise AccessDenied('User belongs to another tenant')
    data = request.json or {}
    raw_ids = data.get('role_ids') or []
    if not isinstance(raw_ids, list) or any(not isinstance(x, int) for x in raw_ids):
        abort(400, description='role_ids must be list[int]')
    role_ids = set(raw_ids)
    repo = SqlRoleRepository(session)
    roles = [repo.get(rid) for rid in sorted(role_ids)]
    missing = sorted(rid for rid, r in zip(sorted(role_ids), roles) if r is None)
    if missing:
        abort(400, description=f'Unknown role ids: {missing}')
    for role in roles:
        if not RoleManager.can_view(principal, role):
            raise AccessDenied(f'Role {role.id} is not accessible from this tenant')
        if not RoleManager.can_assign(principal, role):
            raise AccessDenied(f'Role {role.name} can only be assigned by a platform administrator')
        if role.tenant_id is not None and role.tenant_id != user.tenant_id:
            abort(400, description=f'Role {role.id} belongs to another tenant than the user')
    # Replace direct assignments
    session.execute(delete(UserRole).where(UserRole.user_id == user.id))
    for rid in role_ids:
        session.add(UserRole(user_id=user.id, role_id=rid))
    session.flush()
    return {'user_id': user.id, 'role_ids': sorted(role_ids)}


# --- Auth ---

@iam_bp.post('/auth/login')
def login():
    data = request.json or {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        abort(401, description='invalid credentials')
    principal = load_principal(user.id, session)
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims=principal_claims(principal))
    return {'access_token': token, 'home_path': get_authorizer().home_path(principal)}


@iam_bp.get('/auth/me')
@jwt_required()
def me():
    # Identity stored as string, cast back to int for DB lookup
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    principal = load_principal(user.id, session)
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'tenant_id': user.tenant_id,
        'role_ids': sorted(principal.role_ids),
        'roles': sorted(principal.role_names),
        'perms': sorted(principal.permissions),
        'home_path': get_authorizer().home_path(principal),
    }


# --- Audit ---

@iam_bp.get('/audit/logs')
@require_authority('system.logs')
def list_audit_logs():
    session = get_db()
    principal = current_principal()
    limit, offset = _pagination()
    q = select(AuditLog)
    if principal.tenant_id is not None:
        q = q.where(AuditLog.actor_tenant_id == principal.tenant_id)
    action = request.args.get('action')
    if action:
        q = q.where(AuditLog.action == action)
    total = session.execute(select(func.count()).select_from(q.subquery())).scalar_one()
    rows = session.execute(q.order_by(AuditLog.id.desc()).offset(offset).limit(limit)).scalars().all()
    data = [
        {
            'id': r.id,
            'actor_user_id': r.actor_user_id,
            'actor_tenant_id': r.actor_tenant_id,
            'action': r.action,
            'entity': r.entity,
            'entity_id': r.entity_id,
            'meta': r.meta or {},
            'created_at': r.created_at.isoformat() if r.created_at else None,
        }
        for r in rows
    ]
    return page_payload(data, total, limit, offset)
