"""Pytest fixtures for the NexCart commerce tests."""
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.core.capabilities import AuthenticatedAdmin
from apps.payguard.models import PaymentMethod
from apps.shopcore import ledger
from apps.shopcore.models import Customer, Product


ADDRESS = {
    "full_name": "Rahim Uddin",
    "phone": "01711000000",
    "address": "House 12, Road 5, Dhanmondi",
    "city": "Dhaka",
    "zip_code": "1205",
}


@pytest.fixture
def make_customer(db):
    """Create a customer with a login account."""
    User = get_user_model()
    counter = {"n": 0}

    def _make(name="Rahim Uddin", email=None):
        counter["n"] += 1
        email = email or f"customer{counter['n']}@example.com"
        account = User.objects.create_user(username=email, email=email, password="secret-pass-123")
        return Customer.objects.create(name=name, email=email, phone="01711000000", account=account)

    return _make


@pytest.fixture
def customer(make_customer):
    return make_customer()


@pytest.fixture
def other_customer(make_customer):
    return make_customer(name="Karim Mia")


@pytest.fixture
def make_product(db):
    """Create an active product; 500 per unit at a cost of 300 unless overridden."""

    def _make(**overrides):
        fields = {
            "title": "Wireless Headphones",
            "category": "electronics",
            "buy_price": Decimal("300.00"),
            "price": Decimal("500.00"),
            "stock_quantity": 10,
        }
        fields.update(overrides)
        return Product.objects.create(**fields)

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def admin():
    return AuthenticatedAdmin(identifier="1", email="ops@nexcart.test")


@pytest.fixture
def place_order(customer, product):
    """
    Place an order through the ledger. Defaults give a plain bKash order:
    2 x 500 + 60 delivery, declared 1060, paid by bKash.
    """

    def _place(quantity=2, declared_amount=None, payment_method=PaymentMethod.BKASH,
               transaction_id=None, delivery_charge=Decimal("60.00"), for_customer=None,
               for_product=None, **kwargs):
        target = for_product or product
        price = target.sale_price or target.price
        if declared_amount is None:
            declared_amount = price * quantity + delivery_charge
        return ledger.create_order(
            customer_id=(for_customer or customer).id,
            lines=[{"product_id": str(target.id), "quantity": quantity}],
            shipping_address=ADDRESS,
            delivery_charge=delivery_charge,
            payment_method=payment_method,
            declared_amount=declared_amount,
            transaction_id=transaction_id,
            **kwargs,
        )

    return _place


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def staff_user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="ops", email="ops@nexcart.test", password="secret-pass-123", is_staff=True
    )
