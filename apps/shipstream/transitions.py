"""
Order status transition graph.

Admin shipping updates are checked against this graph; payment
verification and customer cancellation use the same tables so every
writer agrees on what is legal.
"""
from typing import Dict, FrozenSet

from apps.core.exceptions import InvalidStateTransitionException
from apps.shopcore.models import OrderStatus

S = OrderStatus

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    S.AWAITING_PAYMENT: frozenset({S.AWAITING_VERIFICATION, S.CANCELLED, S.ON_HOLD}),
    S.AWAITING_VERIFICATION: frozenset({S.PROCESSING, S.CANCELLED, S.ON_HOLD}),
    S.PROCESSING: frozenset({S.PACKAGING, S.SHIPPED, S.CANCELLED, S.ON_HOLD}),
    S.PACKAGING: frozenset({S.SHIPPED, S.CANCELLED, S.ON_HOLD}),
    S.SHIPPED: frozenset({S.IN_TRANSIT, S.OUT_FOR_DELIVERY, S.DELIVERED, S.ON_HOLD}),
    S.IN_TRANSIT: frozenset({S.OUT_FOR_DELIVERY, S.DELIVERED, S.ON_HOLD}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED, S.ON_HOLD}),
    S.ON_HOLD: frozenset({
        S.AWAITING_VERIFICATION, S.PROCESSING, S.PACKAGING, S.SHIPPED,
        S.IN_TRANSIT, S.OUT_FOR_DELIVERY, S.CANCELLED,
    }),
    S.DELIVERED: frozenset(),
    S.CANCELLED: frozenset(),
}

# Customer-initiated cancellation is limited to orders that have not shipped
CANCELLABLE_STATUSES = frozenset({
    S.AWAITING_PAYMENT, S.AWAITING_VERIFICATION, S.PROCESSING, S.PACKAGING, S.ON_HOLD,
})

# Moving into these requires a verified payment
FULFILMENT_STATUSES = frozenset({
    S.PROCESSING, S.PACKAGING, S.SHIPPED, S.IN_TRANSIT, S.OUT_FOR_DELIVERY, S.DELIVERED,
})


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def check_transition(current: str, new: str) -> None:
    if not can_transition(current, new):
        raise InvalidStateTransitionException(
            f"Cannot move an order from {S(current).label} to {S(new).label}.",
            current_status=current,
        )
