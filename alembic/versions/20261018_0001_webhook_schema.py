"""Orders, payments and processed webhook events

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

_ORDER_STATUSES = ("pending", "paid", "preparing", "ready", "delivered", "cancelled")
_PAYMENT_STATUSES = ("pending", "approved", "rejected", "refunded")
_EVENT_TYPES = ("payment", "order")
_OUTCOMES = (
    "applied",
    "noop",
    "invalid_transition",
    "order_not_found",
    "unresolved",
    "acknowledged",
)


def _status_enum(values: tuple[str, ...], name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("status", _status_enum(_ORDER_STATUSES, "orderstatus"), nullable=False),
        sa.Column("payment_id", sa.String(length=128), nullable=True),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orders_tenant_id", "orders", ["tenant_id"])
    op.create_index("ix_orders_status", "orders", ["status"])

    op.create_table(
        "payments",
        sa.Column("payment_id", sa.String(length=128), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("status", _status_enum(_PAYMENT_STATUSES, "paymentstatus"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.PrimaryKeyConstraint("payment_id"),
    )
    op.create_index("ix_payments_order_id", "payments", ["order_id"])

    op.create_table(
        "processed_webhook_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("external_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", _status_enum(_EVENT_TYPES, "webhookeventtype"), nullable=False),
        sa.Column("outcome", _status_enum(_OUTCOMES, "processingoutcome"), nullable=False),
        sa.Column(
            "processed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_id", "event_type", name="uq_processed_webhook_event"),
    )
    op.create_index(
        "ix_processed_webhook_events_processed_at",
        "processed_webhook_events",
        ["processed_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_processed_webhook_events_processed_at", table_name="processed_webhook_events"
    )
    op.drop_table("processed_webhook_events")
    op.drop_index("ix_payments_order_id", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_tenant_id", table_name="orders")
    op.drop_table("orders")
