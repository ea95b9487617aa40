"""Create payment_events table

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Append-only, hash-chained log of every payment attempt (committed or rejected).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OUTCOMES = ("COMMITTED", "REJECTED")
REASONS = (
    "VENDOR_NOT_APPROVED",
    "BENEFICIARY_NOT_VERIFIED",
    "INVALID_AMOUNT",
    "PAYMENT_TOO_LARGE",
    "DUPLICATE_PAYMENT",
    "INSUFFICIENT_FUNDS",
)


def upgrade() -> None:
    op.create_table(
        "payment_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("payment_id", sa.String(64), nullable=False),
        sa.Column("beneficiary_id", sa.String(128), nullable=False),
        sa.Column("vendor_id", sa.String(128), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column(
            "outcome",
            sa.Enum(*OUTCOMES, name="payment_outcome", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "reason",
            sa.Enum(*REASONS, name="rejection_reason", create_constraint=True),
            nullable=True,
        ),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("disaster_id", sa.String(128), nullable=True),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("transaction_hash", sa.String(64), nullable=False),
        sa.Column("previous_hash", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sequence", name="uq_payment_events_sequence"),
        sa.UniqueConstraint("payment_id", name="uq_payment_events_payment_id"),
        sa.UniqueConstraint("transaction_hash", name="uq_payment_events_transaction_hash"),
    )
    op.create_index("ix_payment_events_sequence", "payment_events", ["sequence"])
    op.create_index("ix_payment_events_payment_id", "payment_events", ["payment_id"])
    op.create_index("ix_payment_events_beneficiary_id", "payment_events", ["beneficiary_id"])
    op.create_index("ix_payment_events_vendor_id", "payment_events", ["vendor_id"])
    op.create_index("ix_payment_events_timestamp", "payment_events", ["timestamp"])
    op.create_index("ix_payment_events_outcome", "payment_events", ["outcome"])
    op.create_index("ix_payment_events_disaster_id", "payment_events", ["disaster_id"])
    op.create_index("ix_payment_events_transaction_hash", "payment_events", ["transaction_hash"])
    op.create_index("ix_payment_events_previous_hash", "payment_events", ["previous_hash"])


def downgrade() -> None:
    for column in (
        "previous_hash",
        "transaction_hash",
        "disaster_id",
        "outcome",
        "timestamp",
        "vendor_id",
        "beneficiary_id",
        "payment_id",
        "sequence",
    ):
        op.drop_index(f"ix_payment_events_{column}", table_name="payment_events")
    op.drop_table("payment_events")
