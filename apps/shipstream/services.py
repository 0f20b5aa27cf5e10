"""
ShipStream services - shipping progression, cancellation and public tracking
"""
import logging
from typing import Dict, Optional

from django.db import transaction

from apps.core.capabilities import require_admin
from apps.core.exceptions import (
    AlreadyCancelledException,
    ForbiddenException,
    InvalidStateTransitionException,
    NotCancellableException,
    ValidationException,
)
from apps.core.results import service_operation
from apps.notifications.messages import NotificationKind
from apps.notifications.sink import ADMIN, notify
from apps.payguard.models import PaymentStatus
from apps.shopcore.catalog import ProductCatalog
from apps.shopcore.ledger import fetch_order
from apps.shopcore.models import Order, OrderStatus
from .history import record_status
from .transitions import CANCELLABLE_STATUSES, FULFILMENT_STATUSES, check_transition

logger = logging.getLogger(__name__)


def _restock(order: Order, catalog: ProductCatalog) -> None:
    for item in order.items.all():
        catalog.restore_stock(item.product_id, item.quantity)


@service_operation("update_shipping_status")
def update_shipping_status(order_id: str, new_status: str, admin, notes: Optional[str] = None) -> Order:
    """
    Admin moves an order along the fulfilment graph and logs the step.
    Fulfilment statuses are only reachable once the payment is verified.
    """
    admin = require_admin(admin)
    if new_status not in OrderStatus.values:
        raise ValidationException(f"Unknown order status: {new_status}", field='status')

    with transaction.atomic():
        order = fetch_order(order_id, for_update=True)
        check_transition(order.order_status, new_status)
        if new_status in FULFILMENT_STATUSES and order.payment.status != PaymentStatus.VERIFIED:
            raise InvalidStateTransitionException(
                f"Order {order_id} cannot be {OrderStatus(new_status).label.lower()} before its payment is verified.",
                current_status=order.order_status,
            )
        if new_status == OrderStatus.AWAITING_VERIFICATION and order.payment.status == PaymentStatus.FAILED:
            raise InvalidStateTransitionException(
                f"Order {order_id} has a rejected payment and cannot return to verification.",
                current_status=order.order_status,
            )
        if new_status == OrderStatus.CANCELLED:
            _restock(order, ProductCatalog())

        record_status(order, new_status, notes or '')
        notify(NotificationKind.SHIPPING_UPDATED, order, order.customer, notes=notes or '')

    logger.info(f"Shipping status of {order_id} set to {new_status} by {admin}")
    return order


@service_operation("cancel_order")
def cancel_order(order_id: str, customer_id) -> Order:
    """
    Customer cancels their own order before it ships.
    Stock taken at creation is put back.
    """
    with transaction.atomic():
        order = fetch_order(order_id, for_update=True)
        if str(order.customer_id) != str(customer_id):
            raise ForbiddenException('You can only cancel your own orders.')
        if order.order_status == OrderStatus.CANCELLED:
            raise AlreadyCancelledException(order_id)
        if order.order_status not in CANCELLABLE_STATUSES:
            raise NotCancellableException(order_id, order.get_order_status_display())

        _restock(order, ProductCatalog())
        record_status(order, OrderStatus.CANCELLED, 'Order cancelled by customer.')
        notify(NotificationKind.ORDER_CANCELLED, order, ADMIN)

    logger.info(f"Order {order_id} cancelled by customer {customer_id}")
    return order


@service_operation("track_order_public")
def track_order_public(order_id: str) -> Dict:
    """
    Public tracking view: identifier, status and history only, no money or personal data.
    """
    order = fetch_order((order_id or '').strip())
    updates = list(order.shipping_updates.all())
    delivered = order.order_status == OrderStatus.DELIVERED
    return {
        'order_id': order.order_id,
        'order_status': order.order_status,
        'order_status_label': order.get_order_status_display(),
        'shipping_updates': [u.as_dict() for u in updates],
        'created_at': order.created_at.isoformat(),
        'is_delivered': delivered,
        'delivered_at': updates[-1].timestamp.isoformat() if delivered and updates else None,
    }
