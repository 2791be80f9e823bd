"""assets, usage logs and repair tickets

Revision ID: 0001_initial_assets
Revises:
Create Date: 2025-10-01
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_assets'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('assets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('type', sa.String(length=32), nullable=False, server_default='chamber'),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('category', sa.String(length=80)),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='available'),
        sa.Column('manufacturer', sa.String(length=120)),
        sa.Column('model', sa.String(length=120)),
        sa.Column('serial_number', sa.String(length=120)),
        sa.Column('location', sa.String(length=120)),
        sa.Column('calibration_date', sa.String(length=40)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_assets_type', 'assets', ['type'])
    op.create_index('ix_assets_status', 'assets', ['status'])

    op.create_table('usage_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('asset_id', sa.Integer(), sa.ForeignKey('assets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user', sa.String(length=80), nullable=False, server_default=''),
        sa.Column('project_id', sa.String(length=64)),
        sa.Column('test_project_id', sa.String(length=64)),
        sa.Column('start_time', sa.String(length=40), nullable=False),
        sa.Column('end_time', sa.String(length=40)),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='not-started'),
        sa.Column('notes', sa.Text()),
        sa.Column('selected_config_ids', sa.JSON()),
        sa.Column('selected_waterfall', sa.String(length=64)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_usage_logs_asset_id', 'usage_logs', ['asset_id'])
    op.create_index('ix_usage_logs_status', 'usage_logs', ['status'])

    op.create_table('repair_tickets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('asset_id', sa.Integer(), sa.ForeignKey('assets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='quote-pending'),
        sa.Column('problem_desc', sa.Text(), nullable=False, server_default=''),
        sa.Column('vendor_name', sa.String(length=120)),
        sa.Column('quote_amount', sa.Float()),
        sa.Column('quote_at', sa.String(length=40)),
        sa.Column('expected_return_at', sa.String(length=40)),
        sa.Column('completed_at', sa.String(length=40)),
        sa.Column('created_at', sa.String(length=40)),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('timeline', sa.JSON()),
    )
    op.create_index('ix_repair_tickets_asset_id', 'repair_tickets', ['asset_id'])
    op.create_index('ix_repair_tickets_status', 'repair_tickets', ['status'])


def downgrade():
    op.drop_table('repair_tickets')
    op.drop_table('usage_logs')
    op.drop_table('assets')
