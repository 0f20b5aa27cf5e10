"""Tests for the notification sink."""
import pytest
from django.core import mail

from apps.notifications import sink
from apps.notifications.messages import NotificationKind, build_admin_message, build_customer_message
from apps.payguard import services as payments

pytestmark = pytest.mark.django_db


class TestNotify:

    def test_order_created_mails_customer_and_admin(self, place_order, customer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            order = place_order().value

        recipients = sorted(m.to[0] for m in mail.outbox)
        assert recipients == sorted([customer.email, "admin@nexcart.test"])
        assert all(order.order_id in m.subject for m in mail.outbox)

    def test_nothing_sent_when_transaction_rolls_back(self, place_order, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            result = place_order(declared_amount="1")

        assert not result.ok
        assert callbacks == []
        assert mail.outbox == []

    def test_payment_verified_goes_to_customer(self, place_order, admin, customer,
                                              django_capture_on_commit_callbacks):
        order = place_order(transaction_id="TX-1").value
        with django_capture_on_commit_callbacks(execute=True):
            payments.verify_payment(order.order_id, admin)

        assert [m.to for m in mail.outbox] == [[customer.email]]
        assert "Payment Verified" in mail.outbox[0].subject

    def test_mail_failure_does_not_break_the_operation(self, place_order, monkeypatch,
                                                      django_capture_on_commit_callbacks):
        def broken_send_mail(**kwargs):
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr(sink, "send_mail", broken_send_mail)

        with django_capture_on_commit_callbacks(execute=True):
            result = place_order()

        assert result.ok, result.error
        assert mail.outbox == []

    def test_message_build_failure_is_contained(self, place_order, monkeypatch,
                                               django_capture_on_commit_callbacks):
        def broken_builder(*args, **kwargs):
            raise KeyError("template")

        monkeypatch.setattr(sink, "build_customer_message", broken_builder)

        with django_capture_on_commit_callbacks(execute=True):
            result = place_order()

        assert result.ok, result.error
        assert [m.to for m in mail.outbox] == [["admin@nexcart.test"]]

    def test_admin_mailbox_not_configured(self, place_order, settings, customer,
                                          django_capture_on_commit_callbacks):
        settings.NOTIFICATIONS = {"ADMIN_EMAIL": "", "ASYNC": False}

        with django_capture_on_commit_callbacks(execute=True):
            place_order()

        assert [m.to for m in mail.outbox] == [[customer.email]]


class TestMessages:

    def test_customer_message_mentions_notes(self, place_order, customer):
        order = place_order().value
        subject, body = build_customer_message(NotificationKind.PAYMENT_REJECTED, order, customer, "Wrong amount")

        assert order.order_id in subject
        assert "Note: Wrong amount" in body
        assert f"Hello {customer.name}," in body

    def test_admin_message_has_customer_and_total(self, place_order, customer):
        order = place_order().value
        subject, body = build_admin_message(NotificationKind.ORDER_CREATED, order)

        assert subject.startswith("[New Order Received]")
        assert "1,060.00 BDT" in subject
        assert f"Customer: {customer.email}" in body
