"""initial permission, role and tenant tables

Revision ID: 0001_initial_portal_authz
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_portal_authz'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))


def upgrade():
    op.create_table('permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=96), nullable=False, unique=True),
        sa.Column('category', sa.String(length=64), nullable=False, server_default='General'),
        sa.Column('resource', sa.String(length=48), nullable=False),
        sa.Column('action', sa.String(length=48), nullable=False),
        sa.Column('description', sa.String(length=255)),
        _timestamps(),
    )
    op.create_index('ix_permissions_name', 'permissions', ['name'])
    op.create_index('ix_permissions_resource', 'permissions', ['resource'])

    op.create_table('roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('description', sa.String(length=255)),
        sa.Column('kind', sa.String(length=16), nullable=False, server_default='TENANT'),
        sa.Column('tenant_id', sa.String(length=64), nullable=True),
        _timestamps(),
    )
    op.create_index('ix_roles_tenant_id', 'roles', ['tenant_id'])
    # Use batch for SQLite compatibility for unique constraints
    with op.batch_alter_table('roles') as batch_op:
        batch_op.create_unique_constraint('uq_role_name_tenant', ['name', 'tenant_id'])

    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('tenant_id', sa.String(length=64), nullable=True),
        _timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])

    op.create_table('role_permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission_id', sa.Integer(), sa.ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False)
    )
    with op.batch_alter_table('role_permissions') as batch_op:
        batch_op.create_unique_constraint('uq_role_permission', ['role_id', 'permission_id'])

    op.create_table('user_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    )
    with op.batch_alter_table('user_roles') as batch_op:
        batch_op.create_unique_constraint('uq_user_role', ['user_id', 'role_id'])

    op.create_table('user_permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission_id', sa.Integer(), sa.ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False)
    )
    with op.batch_alter_table('user_permissions') as batch_op:
        batch_op.create_unique_constraint('uq_user_permission', ['user_id', 'permission_id'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('actor_tenant_id', sa.String(length=64), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=255)),
        sa.Column('perms_snapshot', sa.JSON(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_audit_actor', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_action', 'audit_logs', ['action'])


def downgrade():
    for tbl in ['audit_logs', 'user_permissions', 'user_roles', 'role_permissions', 'users', 'roles', 'permissions']:
        op.drop_table(tbl)
