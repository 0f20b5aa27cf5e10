"""
Plain-text email content for order events.
"""
from enum import Enum
from typing import Tuple

from django.conf import settings

from apps.core.utils import format_currency


class NotificationKind(str, Enum):
    """Events the order machine emits"""
    ORDER_CREATED = "order_created"
    PAYMENT_SUBMITTED = "payment_submitted"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_REJECTED = "payment_rejected"
    SHIPPING_UPDATED = "shipping_updated"
    ORDER_CANCELLED = "order_cancelled"


def _store_name() -> str:
    return getattr(settings, 'STORE_NAME', 'NexCart')


def _summary_lines(order) -> list:
    payment = getattr(order, 'payment', None)
    lines = [
        f"Order ID: {order.order_id}",
        f"Total Amount: {format_currency(order.grand_total)}",
        f"Status: {order.get_order_status_display()}",
    ]
    if payment is not None:
        lines.append(f"Payment Method: {payment.get_method_display()}")
        lines.append(f"Transaction ID: {payment.transaction_id or 'N/A'}")
    return lines


def build_customer_message(kind: NotificationKind, order, customer, notes: str = '') -> Tuple[str, str]:
    store = _store_name()
    name = customer.name or order.full_name
    if kind == NotificationKind.ORDER_CREATED:
        subject = f"Your {store} Order is Confirmed! (ID: {order.order_id})"
        intro = "Thank you for your order. We have received it and will keep you updated."
    elif kind == NotificationKind.PAYMENT_SUBMITTED:
        subject = f"Your {store} Order #{order.order_id} is Awaiting Verification"
        intro = ("We have received your payment submission. Your order is now being manually verified. "
                 "You will receive another email as soon as your payment is confirmed.")
    elif kind == NotificationKind.PAYMENT_VERIFIED:
        subject = f"Payment Verified - Your Order {order.order_id} is Processing"
        intro = "Your payment has been verified by our team. Your order is now being processed."
    elif kind == NotificationKind.PAYMENT_REJECTED:
        subject = f"Action Needed: Payment for Order {order.order_id} Could Not Be Verified"
        intro = "We could not verify your payment. Your order is on hold; please contact support."
    elif kind == NotificationKind.SHIPPING_UPDATED:
        subject = f"Your Order {order.order_id} is now {order.get_order_status_display()}"
        intro = f"Your order status has been updated to {order.get_order_status_display()}."
    elif kind == NotificationKind.ORDER_CANCELLED:
        subject = f"Your Order {order.order_id} has been Cancelled"
        intro = "Your order has been cancelled."
    else:
        raise ValueError(f"Unknown notification kind: {kind}")

    body = [f"Hello {name},", "", intro]
    if notes:
        body.append(f"Note: {notes}")
    body += ["", *_summary_lines(order), "", f"Thank you for shopping with {store}!"]
    return subject, "\n".join(body)


def build_admin_message(kind: NotificationKind, order, notes: str = '') -> Tuple[str, str]:
    headline = {
        NotificationKind.ORDER_CREATED: "New Order Received",
        NotificationKind.PAYMENT_SUBMITTED: "Payment Submitted for Verification",
        NotificationKind.PAYMENT_VERIFIED: "Payment Verified",
        NotificationKind.PAYMENT_REJECTED: "Payment Rejected",
        NotificationKind.SHIPPING_UPDATED: "Shipping Status Updated",
        NotificationKind.ORDER_CANCELLED: "Order Cancelled by Customer",
    }[kind]
    subject = f"[{headline}] Order #{order.order_id} - {format_currency(order.grand_total)}"
    body = [
        f"{headline}.",
        "",
        f"Customer: {order.customer.email}",
        *_summary_lines(order),
    ]
    if notes:
        body.append(f"Notes: {notes}")
    body += ["", "Please log in to the admin panel for details."]
    return subject, "\n".join(body)
