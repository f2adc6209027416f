"""Baseline migration - users, clients, cases and case activity

Revision ID: 0001_baseline
Revises: 
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create core tables."""

    # ==========================================================================
    # Users (advisors)
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='advisor'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # Clients
    # ==========================================================================
    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name2', sa.String(255), nullable=True),
        sa.Column('name3', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # Cases
    # ==========================================================================
    op.create_table(
        'cases',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('case_number', sa.String(20), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('status', sa.String(100), nullable=False),
        sa.Column('value', sa.Numeric(12, 2), nullable=True),
        sa.Column('broker_name', sa.String(255), nullable=True),
        sa.Column('task_owner_name', sa.String(255), nullable=True),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('advisor_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('case_number', name='uq_case_number'),
        sa.CheckConstraint('value IS NULL OR value >= 0', name='ck_case_value_non_negative'),
    )
    op.create_index('idx_cases_status', 'cases', ['status'])
    op.create_index('idx_cases_updated', 'cases', ['updated_at'])

    # ==========================================================================
    # Case activity (append-only)
    # ==========================================================================
    op.create_table(
        'case_activities',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'case_id', sa.Uuid(),
            sa.ForeignKey('cases.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'author_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('activity_type', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_case_activity_case_time', 'case_activities', ['case_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_case_activity_case_time', table_name='case_activities')
    op.drop_table('case_activities')
    op.drop_index('idx_cases_updated', table_name='cases')
    op.drop_index('idx_cases_status', table_name='cases')
    op.drop_table('cases')
    op.drop_table('clients')
    op.drop_table('users')
