from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from shared.contracts.enums import (
    OrderStatus,
    PaymentStatus,
    ProcessingOutcome,
    WebhookEventType,
)


def _enum_column(enum_cls: type[PyEnum]) -> Enum:
    # Stored by value: the storefront writes lowercase statuses to the same tables.
    return Enum(
        enum_cls,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
        length=32,
    )


class Base(DeclarativeBase):
    pass


class OrderORM(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    status: Mapped[OrderStatus] = mapped_column(
        _enum_column(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True
    )
    payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="ARS")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class PaymentORM(Base):
    __tablename__ = "payments"

    payment_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id"), nullable=False, index=True
    )
    status: Mapped[PaymentStatus] = mapped_column(
        _enum_column(PaymentStatus), nullable=False, default=PaymentStatus.PENDING
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class ProcessedWebhookEventORM(Base):
    __tablename__ = "processed_webhook_events"
    __table_args__ = (
        UniqueConstraint("external_id", "event_type", name="uq_processed_webhook_event"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(128), nullable=False)
    event_type: Mapped[WebhookEventType] = mapped_column(
        _enum_column(WebhookEventType), nullable=False
    )
    outcome: Mapped[ProcessingOutcome] = mapped_column(
        _enum_column(ProcessingOutcome), nullable=False, default=ProcessingOutcome.APPLIED
    )
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
