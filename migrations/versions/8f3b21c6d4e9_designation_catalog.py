"""designation catalog

Revision ID: 8f3b21c6d4e9
Revises: 5c1e9a7d2b40
Create Date: 2025-02-18 14:03:27.551902

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8f3b21c6d4e9"
down_revision: Union[str, Sequence[str], None] = "5c1e9a7d2b40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the designation catalog."""
    op.create_table(
        "designation",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("designation", sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("designation"),
    )


def downgrade() -> None:
    """Drop the designation catalog."""
    op.drop_table("designation")
