"""
ShipStream Models - Order shipping history
Tables: ShippingUpdates
Dependency: Links to ShopCore via Order
"""
from django.db import models
from django.utils import timezone

from apps.shopcore.models import OrderStatus


class ShippingStatus(models.TextChoices):
    """Statuses that may appear in an order's shipping history."""
    ORDER_RECEIVED = 'order_received', 'Order Received'
    AWAITING_PAYMENT = OrderStatus.AWAITING_PAYMENT.value, OrderStatus.AWAITING_PAYMENT.label
    AWAITING_VERIFICATION = OrderStatus.AWAITING_VERIFICATION.value, OrderStatus.AWAITING_VERIFICATION.label
    PROCESSING = OrderStatus.PROCESSING.value, OrderStatus.PROCESSING.label
    PACKAGING = OrderStatus.PACKAGING.value, OrderStatus.PACKAGING.label
    SHIPPED = OrderStatus.SHIPPED.value, OrderStatus.SHIPPED.label
    IN_TRANSIT = OrderStatus.IN_TRANSIT.value, OrderStatus.IN_TRANSIT.label
    OUT_FOR_DELIVERY = OrderStatus.OUT_FOR_DELIVERY.value, OrderStatus.OUT_FOR_DELIVERY.label
    DELIVERED = OrderStatus.DELIVERED.value, OrderStatus.DELIVERED.label
    CANCELLED = OrderStatus.CANCELLED.value, OrderStatus.CANCELLED.label
    ON_HOLD = OrderStatus.ON_HOLD.value, OrderStatus.ON_HOLD.label


class ShippingUpdate(models.Model):
    """
    One entry of an order's append-only shipping history.
    Rows are only ever inserted; ``sequence`` orders them per order.
    """
    order = models.ForeignKey('shopcore.Order', on_delete=models.CASCADE, related_name='shipping_updates')
    sequence = models.PositiveIntegerField()
    status = models.CharField(max_length=30, choices=ShippingStatus.choices)
    notes = models.TextField(blank=True, default='')
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'shipstream_shipping_updates'
        verbose_name = 'Shipping Update'
        verbose_name_plural = 'Shipping Updates'
        ordering = ['sequence']
        constraints = [
            models.UniqueConstraint(fields=['order', 'sequence'], name='shipstream_update_order_sequence'),
        ]

    def __str__(self):
        return f"{self.order_id} #{self.sequence} - {self.status} at {self.timestamp}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("Shipping history entries are append-only")
        super().save(*args, **kwargs)

    def as_dict(self) -> dict:
        return {
            'status': self.status,
            'label': self.get_status_display(),
            'notes': self.notes,
            'timestamp': self.timestamp.isoformat(),
        }
