"""votes and split payments

Revision ID: 7c2e4b1a9f05
Revises: 3a1f0c9d2b7e
Create Date: 2026-10-18 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c2e4b1a9f05'
down_revision: Union[str, Sequence[str], None] = '3a1f0c9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column(
        'expense_splits',
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.add_column('expense_splits', sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True))

    op.create_table(
        'votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('poll_id', sa.Integer(), sa.ForeignKey('polls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_id', sa.Integer(), sa.ForeignKey('poll_options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('poll_id', 'option_id', 'user_id', name='uq_vote_option_user'),
    )
    op.create_index('ix_votes_id', 'votes', ['id'])
    op.create_index('ix_votes_poll_id', 'votes', ['poll_id'])
    op.create_index('ix_votes_option_id', 'votes', ['option_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('votes')
    op.drop_column('expense_splits', 'paid_at')
    op.drop_column('expense_splits', 'is_paid')
