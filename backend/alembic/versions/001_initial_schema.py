"""Initial schema - areas, users, tickets, comments, history

Revision ID: 001
Revises:
Create Date: 2026-10-18

WHY: Creates every table the ticket service needs. Users and tickets both
reference areas, and tickets reference users, so tables are created in
that order.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLE = sa.Enum('USER', 'MANAGER', 'ADMIN', 'SUPERADMIN', name='userrole')
TICKET_STATUS = sa.Enum('OPEN', 'IN_PROGRESS', 'CLOSED', name='ticketstatus')
TRANSFER_STATUS = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='transferstatus')


def upgrade() -> None:
    """
    Create areas, users, tickets, ticket_comments and ticket_history.

    WHY: Index choices follow the query patterns:
    - users.email for login, users.manager_id for MANAGER team lookups
    - tickets.assigned_to_id / area_id / status for the visibility filter
    - ticket_id on comments and history for per-ticket listings
    """
    op.create_table(
        'areas',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_areas_id', 'areas', ['id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', USER_ROLE, nullable=False, server_default='USER'),
        sa.Column('area_id', sa.Integer(), sa.ForeignKey('areas.id'), nullable=True),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_area_id', 'users', ['area_id'])
    op.create_index('ix_users_manager_id', 'users', ['manager_id'])

    op.create_table(
        'tickets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', TICKET_STATUS, nullable=False, server_default='OPEN'),
        sa.Column('area_id', sa.Integer(), sa.ForeignKey('areas.id'), nullable=True),
        sa.Column('target_area_id', sa.Integer(), sa.ForeignKey('areas.id'), nullable=True),
        sa.Column('assigned_to_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('transfer_to_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('transfer_status', TRANSFER_STATUS, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_activity_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tickets_status', 'tickets', ['status'])
    op.create_index('ix_tickets_assigned_to', 'tickets', ['assigned_to_id'])
    op.create_index('ix_tickets_area_id', 'tickets', ['area_id'])
    op.create_index('ix_tickets_target_area_id', 'tickets', ['target_area_id'])

    op.create_table(
        'ticket_comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ticket_id', sa.Integer(), sa.ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ticket_comments_ticket_id', 'ticket_comments', ['ticket_id'])

    # WHY: history is append-only; from_id/to_id are null for rejections
    op.create_table(
        'ticket_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ticket_id', sa.Integer(), sa.ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('to_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ticket_history_ticket_id', 'ticket_history', ['ticket_id'])


def downgrade() -> None:
    """Drop all tables, then the enum types (no-op on SQLite)."""
    op.drop_index('ix_ticket_history_ticket_id', table_name='ticket_history')
    op.drop_table('ticket_history')
    op.drop_index('ix_ticket_comments_ticket_id', table_name='ticket_comments')
    op.drop_table('ticket_comments')
    op.drop_index('ix_tickets_target_area_id', table_name='tickets')
    op.drop_index('ix_tickets_area_id', table_name='tickets')
    op.drop_index('ix_tickets_assigned_to', table_name='tickets')
    op.drop_index('ix_tickets_status', table_name='tickets')
    op.drop_table('tickets')
    op.drop_index('ix_users_manager_id', table_name='users')
    op.drop_index('ix_users_area_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_areas_id', table_name='areas')
    op.drop_table('areas')

    bind = op.get_bind()
    TRANSFER_STATUS.drop(bind, checkfirst=True)
    TICKET_STATUS.drop(bind, checkfirst=True)
    USER_ROLE.drop(bind, checkfirst=True)
