"""Tests for order creation in the ledger."""
import re
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.exceptions import ConflictException
from apps.payguard.models import Payment, PaymentMethod, PaymentStatus
from apps.shipstream.models import ShippingStatus
from apps.shopcore import ledger
from apps.shopcore.catalog import ProductCatalog
from apps.shopcore.models import Order, OrderStatus, Product
from apps.shopcore.pricing import PricingPolicy, PricingResolver

from .conftest import ADDRESS

pytestmark = pytest.mark.django_db


class TestCreateOrder:

    def test_manual_payment_order(self, place_order, product):
        result = place_order(quantity=2, declared_amount=Decimal("1060"))

        assert result.ok, result.error
        order = result.value
        assert order.subtotal == Decimal("1000.00")
        assert order.grand_total == Decimal("1060.00")
        assert order.total_cost == Decimal("600.00")
        assert order.profit == Decimal("460.00")
        assert order.order_status == OrderStatus.AWAITING_VERIFICATION

        payment = Payment.objects.get(order=order)
        assert payment.status == PaymentStatus.PENDING
        assert payment.transaction_id is None
        assert payment.amount == Decimal("1060.00")

        product.refresh_from_db()
        assert product.stock_quantity == 8

    def test_declared_amount_mismatch(self, place_order, product):
        result = place_order(quantity=2, declared_amount=Decimal("1000"))

        assert not result.ok
        assert result.kind == "PriceMismatch"
        assert result.error.expected == Decimal("1060.00")
        assert Order.objects.count() == 0
        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_cash_on_delivery(self, place_order):
        result = place_order(payment_method=PaymentMethod.CASH_ON_DELIVERY, transaction_id="IGNORED")

        assert result.ok, result.error
        order = Order.objects.get(pk=result.value.pk)
        assert order.order_status == OrderStatus.PROCESSING
        payment = order.payment
        assert payment.status == PaymentStatus.VERIFIED
        assert payment.transaction_id is None
        assert payment.verified_at is not None

        history = list(order.shipping_updates.values_list("status", "notes"))
        assert history == [
            (ShippingStatus.ORDER_RECEIVED, ""),
            (OrderStatus.PROCESSING, "Cash on Delivery"),
        ]

    def test_transaction_id_at_checkout_submits_payment(self, place_order, settings):
        result = place_order(transaction_id="  8N7A6B5C4D ")

        assert result.ok, result.error
        payment = Payment.objects.get(order=result.value)
        assert payment.status == PaymentStatus.SUBMITTED
        assert payment.transaction_id == "8N7A6B5C4D"
        assert payment.submitted_at is not None
        assert payment.receiver_reference == settings.PAYMENT_RECEIVERS["bkash"]["number"]

    def test_duplicate_transaction_id_at_checkout(self, place_order, product):
        assert place_order(quantity=1, transaction_id="TX-1").ok

        result = place_order(quantity=1, transaction_id="TX-1")

        assert result.kind == "DuplicateTransaction"
        assert isinstance(result.error, ConflictException)
        assert Order.objects.count() == 1
        product.refresh_from_db()
        assert product.stock_quantity == 9

    def test_cod_orders_may_share_null_transaction_id(self, place_order):
        first = place_order(quantity=1, payment_method=PaymentMethod.CASH_ON_DELIVERY)
        second = place_order(quantity=1, payment_method=PaymentMethod.CASH_ON_DELIVERY)
        assert first.ok and second.ok
        assert Payment.objects.filter(transaction_id__isnull=True).count() == 2

    def test_price_integrity_across_lines(self, customer, make_product):
        shirt = make_product(title="Cotton T-Shirt", price=Decimal("350.00"), buy_price=Decimal("200.00"))
        mug = make_product(title="Mug", price=None, buy_price=Decimal("100.00"))

        result = ledger.create_order(
            customer_id=customer.id,
            lines=[
                {"product_id": str(shirt.id), "quantity": 3, "color": "Red", "size": "L"},
                {"product_id": str(mug.id), "quantity": 1},
            ],
            shipping_address=ADDRESS,
            delivery_charge="120",
            payment_method=PaymentMethod.NAGAD,
            # 3 x 350 + 1 x 120 (policy price of 100 at 15%, rounded up to 10) + 120
            declared_amount="1290",
            delivery_cost="100",
        )

        assert result.ok, result.error
        order = result.value
        items = list(order.items.all())
        assert sum(i.unit_price * i.quantity for i in items) + order.delivery_charge == order.grand_total
        assert order.total_cost == Decimal("700.00")
        assert order.profit == order.grand_total - order.total_cost - order.delivery_cost
        assert [(i.title, i.color, i.size) for i in items] == [
            ("Cotton T-Shirt", "Red", "L"),
            ("Mug", "", ""),
        ]

    def test_snapshot_prices_survive_catalog_changes(self, place_order, product):
        order = place_order().value

        Product.objects.filter(pk=product.pk).update(price=Decimal("999.00"), buy_price=Decimal("800.00"))

        order = Order.objects.get(pk=order.pk)
        item = order.items.get()
        assert item.unit_price == Decimal("500.00")
        assert item.unit_cost == Decimal("300.00")
        assert order.grand_total == Decimal("1060.00")

    def test_client_supplied_prices_are_ignored(self, customer, product):
        result = ledger.create_order(
            customer_id=customer.id,
            lines=[{"product_id": str(product.id), "quantity": 1, "unit_price": "1.00"}],
            shipping_address=ADDRESS,
            delivery_charge="60",
            payment_method=PaymentMethod.BKASH,
            declared_amount="61",
        )
        assert result.kind == "PriceMismatch"

    def test_custom_resolver_policy(self, customer, make_product):
        product = make_product(price=None, buy_price=Decimal("100.00"))
        resolver = PricingResolver(PricingPolicy(markup_mode="fixed_amount", markup_value=Decimal("25"),
                                                 rounding="cents"))
        result = ledger.create_order(
            customer_id=customer.id,
            lines=[{"product_id": str(product.id), "quantity": 2}],
            shipping_address=ADDRESS,
            delivery_charge="0",
            payment_method=PaymentMethod.BKASH,
            declared_amount="250",
            resolver=resolver,
        )
        assert result.ok, result.error
        assert result.value.grand_total == Decimal("250.00")


class TestCreateOrderValidation:

    def test_negative_delivery_charge(self, place_order):
        result = place_order(delivery_charge=Decimal("-10"), declared_amount=Decimal("990"))
        assert result.kind == "InvalidCharge"
        assert result.error.http_status == 400

    def test_empty_cart(self, customer):
        result = ledger.create_order(
            customer_id=customer.id, lines=[], shipping_address=ADDRESS,
            delivery_charge="60", payment_method=PaymentMethod.BKASH, declared_amount="60",
        )
        assert result.kind == "ValidationError"

    def test_incomplete_address(self, customer, product):
        result = ledger.create_order(
            customer_id=customer.id,
            lines=[{"product_id": str(product.id), "quantity": 1}],
            shipping_address={"full_name": "Rahim", "phone": "", "address": "Road 5"},
            delivery_charge="60", payment_method=PaymentMethod.BKASH, declared_amount="560",
        )
        assert result.kind == "ValidationError"
        assert "phone" in result.error.message
        assert "city" in result.error.message

    def test_unknown_payment_method(self, place_order):
        result = place_order(payment_method="paypal")
        assert result.kind == "ValidationError"

    def test_unknown_customer(self, product):
        result = ledger.create_order(
            customer_id="6f1c1a1e-0000-4000-8000-00000000dead",
            lines=[{"product_id": str(product.id), "quantity": 1}],
            shipping_address=ADDRESS,
            delivery_charge="60", payment_method=PaymentMethod.BKASH, declared_amount="560",
        )
        assert result.kind == "CustomerNotFound"

    def test_unknown_product(self, customer):
        result = ledger.create_order(
            customer_id=customer.id,
            lines=[{"product_id": "6f1c1a1e-0000-4000-8000-000000000001", "quantity": 1}],
            shipping_address=ADDRESS,
            delivery_charge="60", payment_method=PaymentMethod.BKASH, declared_amount="560",
        )
        assert result.kind == "ProductNotFound"
        assert result.error.http_status == 404

    def test_malformed_amount(self, place_order):
        result = place_order(declared_amount="ten taka")
        assert result.kind == "ValidationError"

    def test_sub_cent_declared_amount_is_a_mismatch(self, place_order):
        result = place_order(declared_amount="1059.995")

        assert result.kind == "PriceMismatch"
        assert Order.objects.count() == 0

    def test_trailing_zeros_in_declared_amount(self, place_order):
        result = place_order(declared_amount="1060.000")

        assert result.ok, result.error
        assert result.value.payment.amount == Decimal("1060.00")

    def test_shipping_address_must_be_an_object(self, customer, product):
        result = ledger.create_order(
            customer_id=customer.id,
            lines=[{"product_id": str(product.id), "quantity": 1}],
            shipping_address="House 12, Dhaka",
            delivery_charge="60", payment_method=PaymentMethod.BKASH, declared_amount="560",
        )
        assert result.kind == "ValidationError"
        assert result.error.field == "shipping_address"

    def test_cart_line_must_be_an_object(self, customer, product):
        result = ledger.create_order(
            customer_id=customer.id,
            lines=[str(product.id)],
            shipping_address=ADDRESS,
            delivery_charge="60", payment_method=PaymentMethod.BKASH, declared_amount="560",
        )
        assert result.kind == "ValidationError"
        assert result.error.field == "items"


class TestStock:

    def test_single_unit_sold_once(self, make_customer, make_product, place_order):
        product = make_product(stock_quantity=1)
        results = [
            place_order(quantity=1, for_product=product, for_customer=make_customer())
            for _ in range(5)
        ]

        assert [r.ok for r in results].count(True) == 1
        assert {r.kind for r in results if not r.ok} == {"InsufficientStock"}
        product.refresh_from_db()
        assert product.stock_quantity == 0

    def test_stock_taken_at_commit_is_conditional(self, customer, make_product):
        """Stock sold between price resolution and commit aborts the whole order."""
        product = make_product(stock_quantity=2)

        class StaleCatalog(ProductCatalog):
            def find_product(self, product_id):
                found = super().find_product(product_id)
                # Someone else buys the last units after we read the row
                Product.objects.filter(pk=found.pk).update(stock_quantity=0)
                return found

        result = ledger.create_order(
            customer_id=customer.id,
            lines=[{"product_id": str(product.id), "quantity": 2}],
            shipping_address=ADDRESS,
            delivery_charge="60",
            payment_method=PaymentMethod.BKASH,
            declared_amount="1060",
            resolver=PricingResolver(PricingPolicy(), catalog=StaleCatalog()),
        )

        assert result.kind == "InsufficientStock"
        assert Order.objects.count() == 0
        product.refresh_from_db()
        assert product.stock_quantity == 0

    def test_failed_order_returns_stock_of_earlier_lines(self, customer, make_product):
        plenty = make_product(title="Plenty", stock_quantity=5)
        scarce = make_product(title="Scarce", stock_quantity=1)

        class StaleCatalog(ProductCatalog):
            def find_product(self, product_id):
                found = super().find_product(product_id)
                if found.pk == scarce.pk:
                    Product.objects.filter(pk=found.pk).update(stock_quantity=0)
                return found

        result = ledger.create_order(
            customer_id=customer.id,
            lines=[
                {"product_id": str(plenty.id), "quantity": 2},
                {"product_id": str(scarce.id), "quantity": 1},
            ],
            shipping_address=ADDRESS,
            delivery_charge="0",
            payment_method=PaymentMethod.BKASH,
            declared_amount="1500",
            resolver=PricingResolver(PricingPolicy(), catalog=StaleCatalog()),
        )

        assert result.kind == "InsufficientStock"
        plenty.refresh_from_db()
        assert plenty.stock_quantity == 5


class TestOrderIds:

    def test_format(self, place_order, settings):
        order = place_order(quantity=1).value
        assert re.fullmatch(rf"{settings.ORDER_ID_PREFIX}-\d{{8}}-\d{{4}}", order.order_id)

    def test_sequential_within_a_day(self, place_order):
        first = place_order(quantity=1).value
        second = place_order(quantity=1).value
        assert first.order_id.endswith("-0001")
        assert second.order_id.endswith("-0002")

    def test_taken_identifier_is_skipped(self, place_order, monkeypatch):
        monkeypatch.setattr(
            ledger, "generate_order_id",
            lambda now=None, attempt=0: f"NCBD-20261019-{attempt + 1:04d}",
        )
        first = place_order(quantity=1).value
        second = place_order(quantity=1).value

        assert first.order_id == "NCBD-20261019-0001"
        assert second.order_id == "NCBD-20261019-0002"

    def test_retries_exhausted(self, place_order, product, monkeypatch, settings):
        monkeypatch.setattr(ledger, "generate_order_id", lambda now=None, attempt=0: "NCBD-20261019-0001")
        assert place_order(quantity=1).ok

        result = place_order(quantity=1)

        assert result.kind == "IdGenerationExhausted"
        assert result.error.attempts == settings.ORDER_ID_MAX_ATTEMPTS
        assert Order.objects.count() == 1
        product.refresh_from_db()
        assert product.stock_quantity == 9


class TestReads:

    def test_owner_sees_own_order(self, place_order, customer):
        order = place_order().value
        assert ledger.get_order(order.order_id, owner_id=customer.id).value == order

    def test_other_customer_gets_not_found(self, place_order, other_customer):
        order = place_order().value
        result = ledger.get_order(order.order_id, owner_id=other_customer.id)
        assert result.kind == "OrderNotFound"

    def test_list_for_user_newest_first(self, place_order, customer, other_customer):
        first = place_order(quantity=1).value
        second = place_order(quantity=1).value
        place_order(quantity=1, for_customer=other_customer)

        orders = ledger.list_orders_for_user(customer.id).value
        assert [o.order_id for o in orders] == [second.order_id, first.order_id]

    def test_soft_deleted_hidden_unless_requested(self, place_order, customer, admin):
        order = place_order().value
        assert ledger.soft_delete_order(order.order_id, admin).ok

        assert ledger.get_order(order.order_id).kind == "OrderNotFound"
        assert ledger.get_order(order.order_id, include_deleted=True).ok
        assert ledger.list_orders_for_user(customer.id).value == []
        assert len(ledger.list_orders_for_user(customer.id, include_deleted=True).value) == 1

    def test_soft_delete_requires_admin(self, place_order):
        order = place_order().value
        assert ledger.soft_delete_order(order.order_id, None).kind == "Forbidden"

    def test_orders_between_rejects_inverted_range(self, admin):
        now = timezone.now()
        result = ledger.list_orders_between(admin, now, now - timedelta(days=1))
        assert result.kind == "ValidationError"

    def test_orders_between_filters_by_creation(self, place_order, admin):
        recent = place_order(quantity=1).value
        old = place_order(quantity=1).value
        Order.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=30))

        now = timezone.now()
        orders = ledger.list_orders_between(admin, now - timedelta(days=1), now + timedelta(minutes=1)).value
        assert [o.order_id for o in orders] == [recent.order_id]
