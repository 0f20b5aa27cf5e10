"""
Shipping history append log.

``record_status`` is the only function that writes ``Order.order_status``;
it keeps the cached status equal to the newest history entry.
"""
import logging

from django.db.models import Max

from .models import ShippingStatus, ShippingUpdate

logger = logging.getLogger(__name__)


def append_entry(order, status: str, notes: str = '') -> ShippingUpdate:
    """Append one history row without touching the order's cached status."""
    last = order.shipping_updates.aggregate(last=Max('sequence'))['last']
    entry = ShippingUpdate.objects.create(
        order=order,
        sequence=(last or 0) + 1,
        status=status,
        notes=notes or '',
    )
    return entry


def record_status(order, status: str, notes: str = '') -> ShippingUpdate:
    """
    Append ``status`` to the history and project it onto the order.
    The order must already be saved; caller holds the row lock.
    """
    if status == ShippingStatus.ORDER_RECEIVED:
        raise ValueError("Order Received is not an order status")
    entry = append_entry(order, status, notes)
    order.order_status = status
    order.save(update_fields=['order_status', 'updated_at'])
    logger.info(f"Order {order.order_id} -> {status}" + (f" ({notes})" if notes else ""))
    return entry
