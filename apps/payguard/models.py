"""
PayGuard Models - Manual payment reconciliation
Tables: Payments
Dependency: Links to ShopCore via Order (one payment record per order)
"""
from decimal import Decimal

from django.db import models

from apps.core.models import BaseModel


class PaymentMethod(models.TextChoices):
    BKASH = 'bkash', 'bKash'
    NAGAD = 'nagad', 'Nagad'
    ROCKET = 'rocket', 'Rocket'
    BANK_TRANSFER = 'bank', 'Bank Transfer'
    CARD = 'card', 'Card'
    CASH_ON_DELIVERY = 'cod', 'Cash on Delivery'


MFS_METHODS = (PaymentMethod.BKASH, PaymentMethod.NAGAD, PaymentMethod.ROCKET)


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    SUBMITTED = 'submitted', 'Submitted - Awaiting Verification'
    VERIFIED = 'verified', 'Verified'
    FAILED = 'failed', 'Failed'


class Payment(BaseModel):
    """
    Payment sub-record of an order.

    ``transaction_id`` is unique across all orders; NULL (cash on delivery,
    or not yet submitted) may repeat.
    """
    order = models.OneToOneField('shopcore.Order', on_delete=models.CASCADE, related_name='payment')
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    transaction_id = models.CharField(max_length=100, unique=True, blank=True, null=True)
    sender_number = models.CharField(max_length=30, blank=True, default='')
    receiver_reference = models.CharField(max_length=255, blank=True, default='',
                                          help_text="MFS number or bank account the customer paid into")
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'),
                                 help_text="Amount the customer declared paying")
    status = models.CharField(max_length=20, choices=PaymentStatus.choices,
                              default=PaymentStatus.PENDING, db_index=True)
    submitted_at = models.DateTimeField(blank=True, null=True, db_index=True)
    verified_at = models.DateTimeField(blank=True, null=True)
    verified_by = models.CharField(max_length=255, blank=True, default='')
    failure_reason = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'payguard_payments'
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'

    def __str__(self):
        return f"{self.get_method_display()} {self.transaction_id or '-'} ({self.status})"

    @property
    def is_cash_on_delivery(self) -> bool:
        return self.method == PaymentMethod.CASH_ON_DELIVERY
