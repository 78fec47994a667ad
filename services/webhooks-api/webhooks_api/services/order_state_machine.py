"""Order status graph.

    pending -> paid -> preparing -> ready -> delivered
    any non-terminal -> cancelled

Payment outcomes reported by the provider and merchant fulfilment requests are both
resolved against explicit tables; nothing here touches storage.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.contracts import OrderStatus, PaymentStatus, TransitionKind

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

_PAYMENT_TRANSITIONS: dict[PaymentStatus, dict[OrderStatus, OrderStatus]] = {
    PaymentStatus.APPROVED: {OrderStatus.PENDING: OrderStatus.PAID},
    PaymentStatus.REJECTED: {OrderStatus.PENDING: OrderStatus.CANCELLED},
    PaymentStatus.REFUNDED: {
        OrderStatus.PAID: OrderStatus.CANCELLED,
        OrderStatus.PREPARING: OrderStatus.CANCELLED,
        OrderStatus.READY: OrderStatus.CANCELLED,
    },
    PaymentStatus.PENDING: {},
}

# Redeliveries of an outcome the order has already moved past.
_PAYMENT_NOOPS: dict[PaymentStatus, frozenset[OrderStatus]] = {
    PaymentStatus.APPROVED: frozenset(
        {OrderStatus.PAID, OrderStatus.PREPARING, OrderStatus.READY}
    ),
    PaymentStatus.REJECTED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
    PaymentStatus.PENDING: frozenset({OrderStatus.PENDING}),
}

_MANUAL_TRANSITIONS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PAID: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
}


@dataclass(frozen=True)
class Transition:
    kind: TransitionKind
    source: OrderStatus
    target: OrderStatus


def _apply(source: OrderStatus, target: OrderStatus) -> Transition:
    return Transition(TransitionKind.APPLY, source, target)


def _noop(current: OrderStatus) -> Transition:
    return Transition(TransitionKind.NOOP, current, current)


def _invalid(current: OrderStatus) -> Transition:
    return Transition(TransitionKind.INVALID, current, current)


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def resolve_payment_transition(current: OrderStatus, outcome: PaymentStatus) -> Transition:
    if is_terminal(current):
        return _noop(current)
    target = _PAYMENT_TRANSITIONS[outcome].get(current)
    if target is not None:
        return _apply(current, target)
    if current in _PAYMENT_NOOPS[outcome]:
        return _noop(current)
    return _invalid(current)


def resolve_manual_transition(current: OrderStatus, requested: OrderStatus) -> Transition:
    """Merchant-driven moves; `pending -> paid` only ever comes from a payment webhook."""
    if requested == current:
        return _noop(current)
    if is_terminal(current):
        return _invalid(current)
    if requested == OrderStatus.CANCELLED:
        return _apply(current, requested)
    if _MANUAL_TRANSITIONS.get(current) == requested:
        return _apply(current, requested)
    return _invalid(current)
