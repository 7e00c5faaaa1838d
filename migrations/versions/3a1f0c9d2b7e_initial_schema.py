"""initial schema

Revision ID: 3a1f0c9d2b7e
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3a1f0c9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


trip_role = postgresql.ENUM('OWNER', 'ADMIN', 'MEMBER', 'VIEWER', name='trip_role', create_type=False)
expense_category = postgresql.ENUM(
    'ACCOMMODATION', 'TRANSPORT', 'FOOD', 'ACTIVITIES', 'SHOPPING', 'OTHER',
    name='expense_category', create_type=False,
)
split_type = postgresql.ENUM('EQUAL', 'CUSTOM', 'PERCENTAGE', name='split_type', create_type=False)
itinerary_item_type = postgresql.ENUM(
    'ACCOMMODATION', 'TRANSPORT', 'ACTIVITY', 'MEAL', 'CUSTOM',
    name='itinerary_item_type', create_type=False,
)
poll_type = postgresql.ENUM('PLACE', 'ACTIVITY', 'DATE', 'CUSTOM', name='poll_type', create_type=False)
poll_status = postgresql.ENUM('ACTIVE', 'CLOSED', 'ARCHIVED', name='poll_status', create_type=False)

ENUMS = (trip_role, expense_category, split_type, itinerary_item_type, poll_type, poll_status)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])

    op.create_table(
        'trips',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_trips_id', 'trips', ['id'])

    op.create_table(
        'trip_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('role', trip_role, nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('trip_id', 'user_id', name='uq_trip_member'),
    )
    op.create_index('ix_trip_members_id', 'trip_members', ['id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('category', expense_category, nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('split_type', split_type, nullable=False),
        sa.Column('paid_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('receipt_url', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_expense_amount_positive'),
    )
    op.create_index('ix_expenses_id', 'expenses', ['id'])
    op.create_index('ix_expenses_trip_id', 'expenses', ['trip_id'])

    op.create_table(
        'expense_splits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('expense_id', sa.Integer(), sa.ForeignKey('expenses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('split_type', split_type, nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
    )
    op.create_index('ix_expense_splits_id', 'expense_splits', ['id'])
    op.create_index('ix_expense_splits_expense_id', 'expense_splits', ['expense_id'])

    op.create_table(
        'itinerary_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', itinerary_item_type, nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('cost', sa.Numeric(10, 2), nullable=True),
        sa.Column('url', sa.String(1000), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_itinerary_items_id', 'itinerary_items', ['id'])
    op.create_index('ix_itinerary_items_trip_id', 'itinerary_items', ['trip_id'])

    op.create_table(
        'polls',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('type', poll_type, nullable=False),
        sa.Column('status', poll_status, nullable=False),
        sa.Column('allow_multiple', sa.Boolean(), nullable=False),
        sa.Column('max_votes', sa.Integer(), nullable=True),
        sa.Column('closes_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_polls_id', 'polls', ['id'])
    op.create_index('ix_polls_trip_id', 'polls', ['trip_id'])

    op.create_table(
        'poll_options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('poll_id', sa.Integer(), sa.ForeignKey('polls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('label', sa.String(200), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
    )
    op.create_index('ix_poll_options_id', 'poll_options', ['id'])
    op.create_index('ix_poll_options_poll_id', 'poll_options', ['poll_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'poll_options', 'polls', 'itinerary_items', 'expense_splits',
        'expenses', 'trip_members', 'trips', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
