#!/usr/bin/env python
"""Idempotent seed script for the permission catalog & SYSTEM roles.

Usage:
    python backend/scripts/seed_authz.py               # seed normally
    python backend/scripts/seed_authz.py --show-roles  # print role -> permission counts (after ensuring seed)
    python backend/scripts/seed_authz.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_authz.py --validate    # exit 2 if any role breaks closure or names unknown permissions
    python backend/scripts/seed_authz.py --export-json roles.json
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json
from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from portal import create_app, get_db  # noqa: E402
from portal.constants.permissions import ROLE_PRESETS, iter_catalog_rows  # noqa: E402
from portal.constants.roles import CS_ADMIN  # noqa: E402
from portal.models.authz import Base, Permission, Role, RolePermission, User, UserRole, ROLE_KIND_SYSTEM  # noqa: E402
from portal.services.catalog import PermissionCatalog, split_permission_name  # noqa: E402
from portal.services.closure import ClosureResolver  # noqa: E402


def ensure_permissions(session):
    existing = {p.name for p in session.execute(select(Permission)).scalars().all()}
    created = 0
    for name, category in iter_catalog_rows():
        if name in existing:
            continue
        resource, action = split_permission_name(name)
        session.add(Permission(name=name, category=category, resource=resource, action=action,
                               description=name.replace('.', ' - ')))
        created += 1
    session.flush()
    return created


def preset_permissions(resolver: ClosureResolver, raw):
    """Closed permission set for a preset entry; '*' expands to the whole catalog."""
    if '*' in raw:
        return resolver.catalog.names
    known = [p for p in raw if p in resolver.catalog]
    for p in raw:
        if p not in resolver.catalog:
            print(f"[WARN] Preset references unknown permission: {p}")
    return resolver.close_requested(known)


def stored_permission_names(session):
    """role id -> permission names, read from the link table rather than loaded relationships."""
    out = {}
    rows = session.execute(
        select(RolePermission.role_id, Permission.name).join(Permission, Permission.id == RolePermission.permission_id)
    )
    for role_id, name in rows:
        out.setdefault(role_id, set()).add(name)
    return out


def ensure_roles(session):
    catalog = PermissionCatalog.from_rows(session.execute(select(Permission)).scalars().all())
    resolver = ClosureResolver(catalog)
    perms_by_name = {p.name: p for p in session.execute(select(Permission)).scalars()}
    existing_roles = {
        r.name: r for r in session.execute(select(Role).where(Role.tenant_id.is_(None))).scalars().all()
    }
    stored = stored_permission_names(session)
    created = 0
    for role_name, raw in ROLE_PRESETS.items():
        role = existing_roles.get(role_name)
        if role is None:
            role = Role(name=role_name, kind=ROLE_KIND_SYSTEM, tenant_id=None, description=role_name)
            session.add(role)
            session.flush()
            existing_roles[role_name] = role
            created += 1
        desired = preset_permissions(resolver, raw)
        current = stored.get(role.id, set())
        # replay the preset onto the stored set one permission at a time
        target = resolver.apply_many(resolver.normalize(current), ((p, True) for p in sorted(desired)))
        if not resolver.is_closed(target):
            bad = sorted(resolver.violations(target))
            print(f"[WARN] Role {role_name} left unchanged; stored permissions are not closed for: {', '.join(bad)}")
            continue
        for name in sorted(target - current):
            session.add(RolePermission(role_id=role.id, permission_id=perms_by_name[name].id))
    session.flush()
    session.expire_all()
    return created


def ensure_initial_admin(session):
    admin_role = session.execute(
        select(Role).where(Role.name == CS_ADMIN, Role.tenant_id.is_(None))
    ).scalar_one_or_none()
    if not admin_role:
        print(f'[WARN] {CS_ADMIN} role missing; skipping admin user creation')
        return
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
    existing_admin = session.execute(select(User).where(User.email == admin_email)).scalar_one_or_none()
    if not existing_admin:
        user = User(name='Administrator', email=admin_email, password_hash='', tenant_id=None)
        user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
        session.add(user)
        session.flush()
        session.add(UserRole(user_id=user.id, role_id=admin_role.id))
        print(f"[INFO] Created initial admin user {admin_email} with temporary password.")


def build_role_permission_map(session):
    stored = stored_permission_names(session)
    mapping = {}
    for role_id, name, tenant_id in session.execute(select(Role.id, Role.name, Role.tenant_id).order_by(Role.id)):
        label = name if tenant_id is None else f'{tenant_id}/{name}'
        mapping[label] = sorted(stored.get(role_id, ()))
    return mapping


def validate(session):
    """Return a list of problems: unknown names and roles that are not closed."""
    catalog = PermissionCatalog.from_rows(session.execute(select(Permission)).scalars().all())
    resolver = ClosureResolver(catalog)
    problems = []
    for label, names in build_role_permission_map(session).items():
        for n in names:
            if n not in catalog:
                problems.append(f"Role '{label}' references unknown permission: {n}")
        bad = resolver.violations(names)
        if bad:
            problems.append(f"Role '{label}' is not closed for: {', '.join(sorted(bad))}")
    return problems


def print_role_summary(session):
    rows = [(name, len(perms), perms[:8]) for name, perms in build_role_permission_map(session).items()]
    if not rows:
        print("[INFO] No roles present.")
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, cnt, sample in rows:
        print(f"{name.ljust(name_w)} | {str(cnt).rjust(5)} | {', '.join(sample)}")


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Seed permission catalog & SYSTEM roles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_authz.py\n  dry run: seed_authz.py --dry-run\n  show roles: seed_authz.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print role permission counts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--validate', action='store_true', help='Check closure & permission references; exits 2 on problems')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export role->permissions JSON (to FILE or stdout if omitted)')
    return p.parse_args(argv)


def ensure_schema(session):
    try:
        session.execute(text('SELECT 1 FROM permissions LIMIT 1'))
    except OperationalError:
        # Bootstrap without migrations; in real env prefer alembic upgrade
        session.rollback()
        import portal.models.audit  # noqa: F401
        Base.metadata.create_all(session.get_bind())
        session.commit()


def run(session, args):
    ensure_schema(session)
    created_p = ensure_permissions(session)
    created_r = ensure_roles(session)
    ensure_initial_admin(session)
    status = 0
    if args.validate:
        problems = validate(session)
        if problems:
            print('\n[VALIDATION] FAIL:')
            for prob in problems:
                print(' -', prob)
            status = 2
        else:
            print('[VALIDATION] OK: all roles closed and referencing known permissions.')
    if args.dry_run or status:
        session.rollback()
        print(f"[DRY-RUN] (rolled back) Permissions would create: {created_p}, Roles would create: {created_r}")
    else:
        session.commit()
        print(f"[DONE] Permissions created: {created_p}, Roles created: {created_r}")
    if args.show_roles:
        print_role_summary(session)
    if args.export_json:
        payload = json.dumps(build_role_permission_map(session), indent=2, sort_keys=True)
        if args.export_json == '-':
            print(payload)
        else:
            with open(args.export_json, 'w', encoding='utf-8') as fh:
                fh.write(payload)
    return status


def main(argv=None):
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        return run(get_db(), args)


if __name__ == '__main__':
    sys.exit(main())
