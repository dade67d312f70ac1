"""initial repair desk tables

Revision ID: 0001_initial_repairdesk
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_repairdesk'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('dni', sa.String(length=32), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('first_name', sa.String(length=80), nullable=False, server_default=''),
        sa.Column('last_name', sa.String(length=80), nullable=False, server_default=''),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False, server_default='')
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table('work_orders',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('device_model', sa.String(length=120), nullable=False),
        sa.Column('issue_description', sa.Text(), nullable=False),
        sa.Column('shelf_location', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('assigned_technician_id', sa.String(length=64), nullable=True),
        sa.Column('assigned_technician_name', sa.String(length=160), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_by_name', sa.String(length=160), nullable=True),
        sa.Column('photo_url', sa.String(length=512), nullable=True),
        sa.Column('photo_base64', sa.Text(), nullable=True),
        sa.Column('date_created', sa.BigInteger(), nullable=False),
        sa.Column('date_started', sa.BigInteger(), nullable=True),
        sa.Column('date_finished', sa.BigInteger(), nullable=True)
    )
    op.create_index('ix_work_orders_status', 'work_orders', ['status'])
    op.create_index('ix_work_orders_assigned_technician_id', 'work_orders', ['assigned_technician_id'])
    op.create_index('ix_work_orders_date_created', 'work_orders', ['date_created'])

    op.create_table('access_codes',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('admin_code', sa.String(length=128), nullable=False),
        sa.Column('tech_code', sa.String(length=128), nullable=False)
    )


def downgrade():
    op.drop_table('access_codes')
    op.drop_index('ix_work_orders_date_created', table_name='work_orders')
    op.drop_index('ix_work_orders_assigned_technician_id', table_name='work_orders')
    op.drop_index('ix_work_orders_status', table_name='work_orders')
    op.drop_table('work_orders')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
