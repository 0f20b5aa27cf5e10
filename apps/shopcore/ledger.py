"""
Order Ledger - order creation, reads and soft deletion

Creation runs as one explicit pipeline inside a single transaction:
validate -> resolve prices -> cross-check amount -> take stock ->
insert order (retrying identifier collisions) -> items -> payment record ->
shipping history -> queue notifications.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.capabilities import require_admin
from apps.core.exceptions import (
    DuplicateTransactionException,
    IdGenerationExhaustedException,
    InsufficientStockException,
    InvalidChargeException,
    OrderNotFoundException,
    PriceMismatchException,
    ValidationException,
)
from apps.core.results import service_operation
from apps.core.utils import to_money
from apps.notifications.messages import NotificationKind
from apps.notifications.sink import ADMIN, notify
from apps.payguard.models import Payment, PaymentMethod, PaymentStatus
from apps.payguard.receivers import receiver_reference_for
from apps.shipstream.history import append_entry, record_status
from apps.shipstream.models import ShippingStatus
from .catalog import ProductCatalog, find_customer
from .models import Order, OrderItem, OrderStatus
from .order_ids import generate_order_id
from .pricing import CartLine, PricedCart, PricingPolicy, PricingResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShippingAddress:
    full_name: str
    phone: str
    address: str
    city: str
    zip_code: str = ''

    REQUIRED = ('full_name', 'phone', 'address', 'city')

    @classmethod
    def from_value(cls, value: Union["ShippingAddress", Dict, None]) -> "ShippingAddress":
        if isinstance(value, cls):
            data = value.__dict__
        else:
            data = value or {}
        if not isinstance(data, dict):
            raise ValidationException("Shipping address must be an object.", field='shipping_address')
        missing = [f for f in cls.REQUIRED if not str(data.get(f) or '').strip()]
        if missing:
            raise ValidationException(
                f"Shipping address is incomplete. Missing: {', '.join(missing)}",
                field='shipping_address'
            )
        return cls(
            full_name=str(data['full_name']).strip(),
            phone=str(data['phone']).strip(),
            address=str(data['address']).strip(),
            city=str(data['city']).strip(),
            zip_code=str(data.get('zip_code') or '').strip(),
        )


def _normalize_lines(lines: Iterable) -> List[CartLine]:
    normalized = [l if isinstance(l, CartLine) else CartLine.from_dict(l) for l in (lines or [])]
    if not normalized:
        raise ValidationException("No order items provided.", field='items')
    return normalized


def _validate_method(method: str) -> str:
    if method not in PaymentMethod.values:
        raise ValidationException(f"Unrecognized payment method: {method}", field='payment_method')
    return method


def fetch_order(order_id: str, include_deleted: bool = False, for_update: bool = False) -> Order:
    """Look up an order by its human-readable identifier or raise OrderNotFound."""
    queryset = Order.objects.visible(include_deleted)
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(order_id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundException(order_id)


def _take_stock(cart: PricedCart, catalog: ProductCatalog) -> None:
    for line in cart.lines:
        if not catalog.decrement_stock_if_available(line.product.pk, line.quantity):
            raise InsufficientStockException(line.title, line.quantity)


def _insert_order(build_order, max_attempts: int) -> Order:
    """
    Save a new order under a fresh identifier.
    The unique index on order_id is the authority; the exists() check only
    skips identifiers that are already taken.
    """
    for attempt in range(max_attempts):
        order_id = generate_order_id(attempt=attempt)
        if Order.objects.filter(order_id=order_id).exists():
            logger.warning(f"Order ID {order_id} already taken (attempt {attempt + 1})")
            continue
        order = build_order(order_id)
        try:
            with transaction.atomic():
                order.save(force_insert=True)
            return order
        except IntegrityError:
            logger.warning(f"Order ID {order_id} collided on insert (attempt {attempt + 1})")
    raise IdGenerationExhaustedException(max_attempts)


def _create_payment(order: Order, method: str, amount: Decimal,
                    transaction_id: Optional[str], sender_number: str) -> Payment:
    now = timezone.now()
    payment = Payment(order=order, method=method, amount=amount, sender_number=sender_number or '')
    if method == PaymentMethod.CASH_ON_DELIVERY:
        payment.status = PaymentStatus.VERIFIED
        payment.verified_at = now
        payment.verified_by = 'system:cod'
    elif transaction_id:
        payment.status = PaymentStatus.SUBMITTED
        payment.transaction_id = transaction_id
        payment.submitted_at = now
        payment.receiver_reference = receiver_reference_for(method)
    try:
        with transaction.atomic():
            payment.save(force_insert=True)
    except IntegrityError:
        raise DuplicateTransactionException(transaction_id)
    return payment


@service_operation("create_order")
def create_order(
    customer_id,
    lines: Iterable,
    shipping_address,
    delivery_charge,
    payment_method: str,
    declared_amount,
    transaction_id: Optional[str] = None,
    sender_number: Optional[str] = None,
    delivery_cost=None,
    resolver: Optional[PricingResolver] = None,
) -> Order:
    """
    Create an order from a cart using catalog prices only.

    ``declared_amount`` is the total the client says it is paying and must
    equal the server-side grand total. Cash on delivery orders go straight
    to Processing with a verified payment; all others wait for verification.
    """
    cart_lines = _normalize_lines(lines)
    address = ShippingAddress.from_value(shipping_address)
    method = _validate_method(payment_method)
    customer = find_customer(customer_id)

    charge = to_money(delivery_charge, field='delivery_charge')
    if charge < 0:
        raise InvalidChargeException(charge)
    declared = to_money(declared_amount, field='declared_amount', quantize=False)
    courier_cost = to_money(delivery_cost or 0, field='delivery_cost')

    resolver = resolver or PricingResolver(PricingPolicy.from_settings())
    cart = resolver.resolve(cart_lines)

    grand_total = cart.subtotal + charge
    if declared != grand_total:
        logger.warning(
            f"Price mismatch for customer {customer.email}. "
            f"Products: {cart.subtotal}, Delivery: {charge}, Declared: {declared}"
        )
        raise PriceMismatchException(declared, grand_total)

    if method == PaymentMethod.CASH_ON_DELIVERY:
        transaction_id = None
    elif transaction_id:
        transaction_id = transaction_id.strip()
        if Payment.objects.filter(transaction_id=transaction_id).exists():
            raise DuplicateTransactionException(transaction_id)

    items = [
        OrderItem(
            product=line.product,
            position=index,
            title=line.title,
            quantity=line.quantity,
            unit_price=line.unit_price,
            unit_cost=line.unit_cost,
            color=line.color,
            size=line.size,
        )
        for index, line in enumerate(cart.lines)
    ]

    def build_order(order_id: str) -> Order:
        order = Order(
            order_id=order_id,
            customer=customer,
            full_name=address.full_name,
            phone=address.phone,
            address=address.address,
            city=address.city,
            zip_code=address.zip_code,
            delivery_charge=charge,
            delivery_cost=courier_cost,
        )
        order.recompute_totals(items)
        return order

    catalog = resolver.catalog
    max_attempts = getattr(settings, 'ORDER_ID_MAX_ATTEMPTS', 5)

    with transaction.atomic():
        _take_stock(cart, catalog)
        order = _insert_order(build_order, max_attempts)
        for item in items:
            item.order = order
        OrderItem.objects.bulk_create(items)
        _create_payment(order, method, order.grand_total, transaction_id, sender_number)

        append_entry(order, ShippingStatus.ORDER_RECEIVED)
        if method == PaymentMethod.CASH_ON_DELIVERY:
            record_status(order, OrderStatus.PROCESSING, 'Cash on Delivery')
        else:
            record_status(order, OrderStatus.AWAITING_VERIFICATION)

        notify(NotificationKind.ORDER_CREATED, order, customer)
        notify(NotificationKind.ORDER_CREATED, order, ADMIN)

    logger.info(f"Order {order.order_id} created for {customer.email}: "
                f"total={order.grand_total} cost={order.total_cost} profit={order.profit} method={method}")
    return order


@service_operation("get_order")
def get_order(order_id: str, owner_id=None, include_deleted: bool = False) -> Order:
    """Fetch one order; with ``owner_id`` only that customer's order is visible."""
    queryset = Order.objects.visible(include_deleted).with_details()
    if owner_id is not None:
        queryset = queryset.for_customer(owner_id)
    try:
        return queryset.get(order_id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundException(order_id)


@service_operation("list_orders_for_user")
def list_orders_for_user(customer_id, include_deleted: bool = False) -> List[Order]:
    return list(
        Order.objects.visible(include_deleted)
        .for_customer(customer_id)
        .with_details()
        .order_by('-created_at')
    )


@service_operation("list_orders_between")
def list_orders_between(admin, start: Optional[datetime] = None, end: Optional[datetime] = None,
                        include_deleted: bool = False) -> List[Order]:
    """Admin calendar view: orders created within [start, end]."""
    require_admin(admin)
    queryset = Order.objects.visible(include_deleted).select_related('customer', 'payment')
    if start and end:
        if start > end:
            raise ValidationException("Start date must be before end date.", field='start')
        queryset = queryset.filter(created_at__gte=start, created_at__lte=end)
    return list(queryset.order_by('-created_at'))


@service_operation("soft_delete_order")
def soft_delete_order(order_id: str, admin) -> Order:
    """Hide an order from default reads without destroying the financial record."""
    admin = require_admin(admin)
    with transaction.atomic():
        order = fetch_order(order_id, for_update=True)
        order.is_deleted = True
        order.save(update_fields=['is_deleted', 'updated_at'])
    logger.info(f"Order {order_id} soft-deleted by {admin}")
    return order
