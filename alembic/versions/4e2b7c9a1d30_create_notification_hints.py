"""create notification hints

Revision ID: 4e2b7c9a1d30
Revises:
Create Date: 2026-10-18 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from hintstore.core.config import settings


# revision identifiers, used by Alembic.
revision: str = '4e2b7c9a1d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_name() -> str:
    return f'{settings.TABLE_PREFIX}notification_hints'


def upgrade() -> None:
    """Upgrade schema."""
    table = _table_name()
    op.create_table(
        table,
        sa.Column('block_type', sa.String(length=10), nullable=False),
        sa.Column('block_id', sa.String(length=36), nullable=False),
        sa.Column('workspace_id', sa.String(length=36), nullable=False),
        sa.Column('create_at', sa.BigInteger(), nullable=False),
        sa.Column('notify_at', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('block_id', 'workspace_id'),
    )
    op.create_index(op.f(f'ix_{table}_notify_at'), table, ['notify_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    table = _table_name()
    op.drop_index(op.f(f'ix_{table}_notify_at'), table_name=table)
    op.drop_table(table)
