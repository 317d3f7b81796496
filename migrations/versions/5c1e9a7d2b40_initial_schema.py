"""initial schema: ticket counters, requests, batches

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2025-02-04 09:12:41.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the ticketing and batch tables."""
    op.create_table(
        "ticket_counter",
        sa.Column("counter_date", sa.Date(), nullable=False),
        sa.Column("ticket_type", sa.String(length=8), nullable=False),
        sa.Column("last_sequence", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("counter_date", "ticket_type"),
        sa.CheckConstraint("last_sequence >= 0", name="ck_ticket_counter_non_negative"),
    )
    op.create_table(
        "account_request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_number", sa.String(length=32), nullable=False),
        sa.Column("selected_type", sa.String(length=64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("surname", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("middle_name", sa.Text(), nullable=False),
        sa.Column("designation", sa.Text(), nullable=False),
        sa.Column("school", sa.Text(), nullable=False),
        sa.Column("school_id", sa.String(length=32), nullable=False),
        sa.Column("personal_gmail", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("email_reject_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("request_number"),
    )
    op.create_table(
        "reset_request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reset_number", sa.String(length=32), nullable=False),
        sa.Column("selected_type", sa.String(length=64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("surname", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("middle_name", sa.Text(), nullable=False),
        sa.Column("school", sa.Text(), nullable=False),
        sa.Column("school_id", sa.String(length=32), nullable=False),
        sa.Column("employee_number", sa.String(length=32), nullable=False),
        sa.Column("reset_email", sa.Text(), nullable=False),
        sa.Column("deped_email", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reset_number"),
    )
    op.create_table(
        "batch",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("batch_number", sa.String(length=64), nullable=False),
        sa.Column("school_code", sa.String(length=32), nullable=False),
        sa.Column("school_name", sa.Text(), nullable=False),
        sa.Column("send_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("received_date", sa.Date(), nullable=True),
        sa.Column("cancelled_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_batch_batch_number", "batch", ["batch_number"])
    op.create_index("ix_batch_school_code", "batch", ["school_code"])
    op.create_table(
        "batch_device",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("device_type", sa.String(length=64), nullable=False),
        sa.Column("device_number", sa.String(length=128), nullable=False),
        sa.ForeignKeyConstraint(["batch_id"], ["batch.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("device_number"),
    )
    op.create_index("ix_batch_device_batch_id", "batch_device", ["batch_id"])
    op.create_table(
        "device_type",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("device_name", sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("device_name"),
    )


def downgrade() -> None:
    """Drop the ticketing and batch tables."""
    op.drop_table("device_type")
    op.drop_index("ix_batch_device_batch_id", table_name="batch_device")
    op.drop_table("batch_device")
    op.drop_index("ix_batch_school_code", table_name="batch")
    op.drop_index("ix_batch_batch_number", table_name="batch")
    op.drop_table("batch")
    op.drop_table("reset_request")
    op.drop_table("account_request")
    op.drop_table("ticket_counter")
