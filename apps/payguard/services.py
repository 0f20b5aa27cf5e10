"""
Payment Reconciliation Engine

This module handles:
- Customer payment submission (transaction id de-duplication)
- Admin verification and rejection of submitted payments
- Payment instructions and the pending-verification queue

Every transition locks the order row, re-reads the current state, and
then mutates it, all inside one transaction.
"""
import logging
from typing import Dict, List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.capabilities import require_admin
from apps.core.exceptions import (
    AlreadyVerifiedException,
    DuplicateTransactionException,
    ForbiddenException,
    InvalidStateTransitionException,
    OrderNotPendingException,
    ValidationException,
)
from apps.core.results import service_operation
from apps.notifications.messages import NotificationKind
from apps.notifications.sink import ADMIN, notify
from apps.shopcore.catalog import find_customer
from apps.shopcore.ledger import fetch_order
from apps.shopcore.models import Order, OrderStatus
from apps.shipstream.history import record_status
from apps.shipstream.transitions import check_transition
from .models import Payment, PaymentMethod, PaymentStatus
from .receivers import payment_instructions, receiver_reference_for, supported_methods

logger = logging.getLogger(__name__)

PAYABLE_ORDER_STATUSES = (OrderStatus.AWAITING_PAYMENT, OrderStatus.AWAITING_VERIFICATION)


def _locked_payment(order: Order) -> Payment:
    return Payment.objects.select_for_update().get(order=order)


@service_operation("submit_payment")
def submit_payment(order_id: str, transaction_id: str, method: Optional[str] = None,
                   sender_number: Optional[str] = None, customer_id=None) -> Order:
    """
    Record the customer's payment proof and queue the order for verification.
    """
    transaction_id = (transaction_id or '').strip()
    if not transaction_id:
        raise ValidationException('Transaction ID (transaction_id) is required', field='transaction_id')
    if method is not None:
        if method not in PaymentMethod.values:
            raise ValidationException(f"Unrecognized payment method: {method}", field='method')
        if method == PaymentMethod.CASH_ON_DELIVERY:
            raise ValidationException('Cash on delivery orders do not take a transaction ID.', field='method')

    # Fast path for a friendly error; the unique index below is the authority
    if Payment.objects.filter(transaction_id=transaction_id).exists():
        raise DuplicateTransactionException(transaction_id)

    with transaction.atomic():
        order = fetch_order(order_id, for_update=True)
        if customer_id is not None and str(order.customer_id) != str(customer_id):
            raise ForbiddenException('You can only pay for your own orders.')
        customer = find_customer(order.customer_id)
        payment = _locked_payment(order)

        if (payment.status != PaymentStatus.PENDING
                or payment.is_cash_on_delivery
                or order.order_status not in PAYABLE_ORDER_STATUSES):
            raise OrderNotPendingException(order_id, order.get_order_status_display())

        if method is not None:
            payment.method = method
        payment.transaction_id = transaction_id
        payment.sender_number = (sender_number or payment.sender_number or '').strip()
        payment.submitted_at = timezone.now()
        payment.receiver_reference = receiver_reference_for(payment.method)
        payment.status = PaymentStatus.SUBMITTED
        try:
            with transaction.atomic():
                payment.save()
        except IntegrityError:
            raise DuplicateTransactionException(transaction_id)

        record_status(
            order, OrderStatus.AWAITING_VERIFICATION,
            f"Payment submitted via {payment.get_method_display()}."
        )
        notify(NotificationKind.PAYMENT_SUBMITTED, order, ADMIN)
        notify(NotificationKind.PAYMENT_SUBMITTED, order, customer)

    logger.info(f"Payment submitted for order {order_id}: {payment.method} txid={transaction_id}")
    return order


@service_operation("verify_payment")
def verify_payment(order_id: str, admin, admin_notes: Optional[str] = None) -> Order:
    """
    Admin confirms a submitted payment; the order moves to Processing.
    A second verification of the same order is a conflict.
    """
    admin = require_admin(admin)
    with transaction.atomic():
        order = fetch_order(order_id, for_update=True)
        payment = _locked_payment(order)

        if payment.status == PaymentStatus.VERIFIED:
            raise AlreadyVerifiedException(order_id)
        if payment.status != PaymentStatus.SUBMITTED:
            raise InvalidStateTransitionException(
                f"No payment has been submitted for order {order_id}.",
                current_status=order.order_status,
            )
        check_transition(order.order_status, OrderStatus.PROCESSING)

        payment.status = PaymentStatus.VERIFIED
        payment.verified_at = timezone.now()
        payment.verified_by = str(admin)
        payment.save(update_fields=['status', 'verified_at', 'verified_by', 'updated_at'])

        if admin_notes:
            order.admin_notes = admin_notes.strip()
            order.save(update_fields=['admin_notes', 'updated_at'])

        record_status(order, OrderStatus.PROCESSING, 'Payment verified by admin.')
        notify(NotificationKind.PAYMENT_VERIFIED, order, order.customer)

    logger.info(f"Payment for order {order_id} verified by {admin}")
    return order


@service_operation("reject_payment")
def reject_payment(order_id: str, admin, reason: str) -> Order:
    """
    Admin marks a submitted payment as failed and puts the order on hold.
    The rejected transaction id stays recorded and cannot be reused.
    """
    admin = require_admin(admin)
    reason = (reason or '').strip()
    if not reason:
        raise ValidationException('A reason is required to reject a payment.', field='reason')

    with transaction.atomic():
        order = fetch_order(order_id, for_update=True)
        payment = _locked_payment(order)

        if payment.status == PaymentStatus.VERIFIED:
            raise AlreadyVerifiedException(order_id)
        if payment.status != PaymentStatus.SUBMITTED:
            raise InvalidStateTransitionException(
                f"No payment has been submitted for order {order_id}.",
                current_status=order.order_status,
            )
        check_transition(order.order_status, OrderStatus.ON_HOLD)

        payment.status = PaymentStatus.FAILED
        payment.failure_reason = reason
        payment.save(update_fields=['status', 'failure_reason', 'updated_at'])

        record_status(order, OrderStatus.ON_HOLD, f"Payment rejected: {reason}")
        notify(NotificationKind.PAYMENT_REJECTED, order, order.customer, notes=reason)

    logger.warning(f"Payment for order {order_id} rejected by {admin}: {reason}")
    return order


@service_operation("list_orders_pending_verification")
def list_orders_pending_verification(include_deleted: bool = False) -> List[Order]:
    """Orders with a submitted, unverified payment; oldest submission first."""
    return list(
        Order.objects.visible(include_deleted)
        .filter(payment__status=PaymentStatus.SUBMITTED)
        .exclude(order_status=OrderStatus.CANCELLED)
        .select_related('customer', 'payment')
        .order_by('payment__submitted_at')
    )


@service_operation("get_payment_instructions")
def get_payment_instructions(order_id: str, owner_id=None) -> Dict:
    """Where and how much to pay for an order still awaiting payment."""
    order = fetch_order(order_id)
    if owner_id is not None and str(order.customer_id) != str(owner_id):
        raise ForbiddenException('You can only view payment details for your own orders.')
    payment = order.payment
    if payment.status != PaymentStatus.PENDING:
        raise OrderNotPendingException(order_id, order.get_order_status_display())
    return {
        'amount': order.grand_total,
        'reference': order.order_id,
        'method': payment.method,
        'details': payment_instructions(payment.method),
    }


@service_operation("list_payment_methods")
def list_payment_methods() -> Dict:
    return supported_methods()
