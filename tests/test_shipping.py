"""Tests for shipping progression, cancellation and public tracking."""
import pytest

from apps.core.exceptions import InvalidStateTransitionException
from apps.payguard import services as payments
from apps.payguard.models import PaymentMethod
from apps.shipstream import services as shipping
from apps.shipstream.models import ShippingStatus, ShippingUpdate
from apps.shipstream.transitions import CANCELLABLE_STATUSES, can_transition, check_transition
from apps.shopcore.models import Order, OrderStatus

pytestmark = pytest.mark.django_db

S = OrderStatus


@pytest.fixture
def cod_order(place_order):
    return place_order(payment_method=PaymentMethod.CASH_ON_DELIVERY).value


@pytest.fixture
def verified_order(place_order, admin):
    order = place_order(transaction_id="TX-VERIFIED").value
    assert payments.verify_payment(order.order_id, admin).ok
    return order


def _status(order):
    return Order.objects.get(pk=order.pk).order_status


class TestTransitionGraph:

    @pytest.mark.parametrize("current,new", [
        (S.AWAITING_VERIFICATION, S.PROCESSING),
        (S.PROCESSING, S.PACKAGING),
        (S.PACKAGING, S.SHIPPED),
        (S.SHIPPED, S.DELIVERED),
        (S.OUT_FOR_DELIVERY, S.DELIVERED),
        (S.ON_HOLD, S.PROCESSING),
    ])
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        (S.DELIVERED, S.AWAITING_VERIFICATION),
        (S.CANCELLED, S.PROCESSING),
        (S.SHIPPED, S.CANCELLED),
        (S.AWAITING_VERIFICATION, S.SHIPPED),
        (S.PROCESSING, S.PROCESSING),
    ])
    def test_rejected(self, current, new):
        assert not can_transition(current, new)
        with pytest.raises(InvalidStateTransitionException):
            check_transition(current, new)

    def test_cancellable_set_stops_at_shipping(self):
        assert S.ON_HOLD in CANCELLABLE_STATUSES
        assert S.PACKAGING in CANCELLABLE_STATUSES
        assert S.SHIPPED not in CANCELLABLE_STATUSES
        assert S.DELIVERED not in CANCELLABLE_STATUSES


class TestUpdateShippingStatus:

    def test_full_progression_is_logged(self, verified_order, admin):
        path = [S.PACKAGING, S.SHIPPED, S.IN_TRANSIT, S.OUT_FOR_DELIVERY, S.DELIVERED]
        for status in path:
            result = shipping.update_shipping_status(verified_order.order_id, status, admin, notes=f"-> {status}")
            assert result.ok, result.error

        order = Order.objects.get(pk=verified_order.pk)
        assert order.order_status == S.DELIVERED
        statuses = list(order.shipping_updates.values_list("status", flat=True))
        assert statuses == [
            ShippingStatus.ORDER_RECEIVED, S.AWAITING_VERIFICATION, S.PROCESSING, *path,
        ]
        assert list(order.shipping_updates.values_list("sequence", flat=True)) == list(range(1, 9))
        assert order.shipping_updates.last().notes == f"-> {S.DELIVERED}"

    def test_cached_status_matches_latest_history_entry(self, cod_order, admin):
        shipping.update_shipping_status(cod_order.order_id, S.ON_HOLD, admin, notes="Address check")
        order = Order.objects.get(pk=cod_order.pk)
        assert order.order_status == order.shipping_updates.last().status

    def test_delivered_cannot_go_back(self, cod_order, admin):
        for status in (S.SHIPPED, S.DELIVERED):
            shipping.update_shipping_status(cod_order.order_id, status, admin)

        result = shipping.update_shipping_status(cod_order.order_id, S.AWAITING_VERIFICATION, admin)

        assert result.kind == "InvalidStateTransition"
        assert _status(cod_order) == S.DELIVERED

    def test_fulfilment_needs_verified_payment(self, place_order, admin):
        order = place_order(transaction_id="TX-UNVERIFIED").value

        result = shipping.update_shipping_status(order.order_id, S.PROCESSING, admin)

        assert result.kind == "InvalidStateTransition"
        assert _status(order) == S.AWAITING_VERIFICATION

    def test_unknown_status(self, cod_order, admin):
        assert shipping.update_shipping_status(cod_order.order_id, "teleported", admin).kind == "ValidationError"

    def test_requires_admin(self, cod_order):
        assert shipping.update_shipping_status(cod_order.order_id, S.PACKAGING, None).kind == "Forbidden"

    def test_admin_cancellation_restocks(self, cod_order, product, admin):
        product.refresh_from_db()
        assert product.stock_quantity == 8

        assert shipping.update_shipping_status(cod_order.order_id, S.CANCELLED, admin, notes="Fraud").ok

        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_history_rows_are_append_only(self, cod_order):
        entry = ShippingUpdate.objects.filter(order=cod_order).first()
        entry.notes = "rewritten"
        with pytest.raises(ValueError):
            entry.save()


class TestCancelOrder:

    def test_customer_cancels_unpaid_order(self, place_order, customer, product):
        order = place_order().value

        result = shipping.cancel_order(order.order_id, customer.id)

        assert result.ok, result.error
        order = Order.objects.get(pk=order.pk)
        assert order.order_status == S.CANCELLED
        assert order.shipping_updates.last().notes == "Order cancelled by customer."
        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_processing_order_cancellable(self, cod_order, customer):
        assert shipping.cancel_order(cod_order.order_id, customer.id).ok

    def test_shipped_order_not_cancellable(self, cod_order, customer, admin, product):
        shipping.update_shipping_status(cod_order.order_id, S.SHIPPED, admin)

        result = shipping.cancel_order(cod_order.order_id, customer.id)

        assert result.kind == "NotCancellable"
        assert isinstance(result.error, InvalidStateTransitionException)
        assert _status(cod_order) == S.SHIPPED
        product.refresh_from_db()
        assert product.stock_quantity == 8

    def test_cancel_twice(self, cod_order, customer, product):
        shipping.cancel_order(cod_order.order_id, customer.id)

        assert shipping.cancel_order(cod_order.order_id, customer.id).kind == "AlreadyCancelled"
        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_only_owner_may_cancel(self, cod_order, other_customer):
        assert shipping.cancel_order(cod_order.order_id, other_customer.id).kind == "Forbidden"
        assert _status(cod_order) == S.PROCESSING

    def test_unknown_order(self, customer):
        assert shipping.cancel_order("NCBD-20000101-0001", customer.id).kind == "OrderNotFound"


class TestPublicTracking:

    def test_tracking_payload(self, cod_order):
        data = shipping.track_order_public(f"  {cod_order.order_id} ").value

        assert data["order_id"] == cod_order.order_id
        assert data["order_status"] == S.PROCESSING
        assert data["order_status_label"] == "Processing"
        assert [u["status"] for u in data["shipping_updates"]] == [ShippingStatus.ORDER_RECEIVED, S.PROCESSING]
        assert data["is_delivered"] is False
        assert data["delivered_at"] is None
        assert "grand_total" not in data
        assert "shipping_address" not in data

    def test_delivered_order(self, cod_order, admin):
        for status in (S.SHIPPED, S.DELIVERED):
            shipping.update_shipping_status(cod_order.order_id, status, admin)

        data = shipping.track_order_public(cod_order.order_id).value

        assert data["is_delivered"] is True
        assert data["delivered_at"] == data["shipping_updates"][-1]["timestamp"]

    def test_unknown_order(self, db):
        assert shipping.track_order_public("NCBD-20000101-0001").kind == "OrderNotFound"
