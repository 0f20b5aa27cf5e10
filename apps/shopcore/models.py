"""
ShopCore Models - Catalog and Order Ledger
Tables: Customers, Products, Orders, OrderItems
"""
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import BaseModel, SoftDeleteModel, SoftDeleteQuerySet


def profit_figures(buy_price: Decimal, sell_price: Decimal) -> dict:
    """Per-unit profit amount and percentage of ``sell_price`` over ``buy_price``."""
    profit = sell_price - buy_price
    if buy_price > 0:
        percent = (profit / buy_price) * 100
    else:
        percent = Decimal('100') if sell_price > 0 else Decimal('0')
    return {
        'profit_amount': profit,
        'profit_percent': percent.quantize(Decimal('0.01')),
    }


class Customer(BaseModel):
    """
    Customer account in the e-commerce platform.
    This is the owner referenced by every order.
    """
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    account = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customer_profile',
        help_text="Login account used by the HTTP layer"
    )

    class Meta:
        db_table = 'shopcore_customers'
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'

    def __str__(self):
        return f"{self.name} ({self.email})"


class Product(SoftDeleteModel):
    """
    Product in the catalog.

    ``buy_price`` is the internal cost and is never exposed to customers.
    ``price`` may be left empty for supplier items; the storefront price is
    then derived from the cost by the pricing policy.
    """
    CATEGORY_CHOICES = [
        ('electronics', 'Electronics'),
        ('clothing', 'Clothing'),
        ('home', 'Home & Kitchen'),
        ('books', 'Books'),
        ('sports', 'Sports & Outdoors'),
        ('beauty', 'Beauty & Personal Care'),
        ('toys', 'Toys & Games'),
        ('grocery', 'Grocery'),
        ('other', 'Other'),
    ]

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        ARCHIVED = 'archived', 'Archived'

    title = models.CharField(max_length=255)
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, default='other')
    description = models.TextField(blank=True, null=True)
    buy_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    sale_price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    stock_quantity = models.PositiveIntegerField(default=0)
    sku = models.CharField(max_length=50, unique=True, blank=True, null=True)
    colors = models.JSONField(default=list, blank=True)
    sizes = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE, db_index=True)

    class Meta(SoftDeleteModel.Meta):
        db_table = 'shopcore_products'
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__isnull=True) | models.Q(price__gt=0),
                name='shopcore_product_price_positive',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.sku or self.id})"

    def clean(self):
        super().clean()
        if self.sale_price is not None and self.sale_price > 0:
            if self.price is not None and self.sale_price >= self.price:
                raise ValidationError({'sale_price': 'Sale price must be less than the regular price.'})
        if self.listed_price is None and (self.buy_price or 0) <= 0:
            raise ValidationError({'price': 'A product needs a sell price or a positive buy price.'})

    @property
    def listed_price(self):
        """Sale price when set and positive, else the regular price (may be None)."""
        if self.sale_price is not None and self.sale_price > 0:
            return self.sale_price
        return self.price

    @property
    def is_orderable(self) -> bool:
        return not self.is_deleted and self.status == self.Status.ACTIVE

    def profit_figures(self, sell_price: Decimal) -> dict:
        """Per-unit profit amount and percentage at the given sell price."""
        return profit_figures(self.buy_price, sell_price)


class OrderStatus(models.TextChoices):
    """Coarse lifecycle stage of an order."""
    AWAITING_PAYMENT = 'awaiting_payment', 'Awaiting Payment'
    AWAITING_VERIFICATION = 'awaiting_verification', 'Awaiting Verification'
    PROCESSING = 'processing', 'Processing'
    PACKAGING = 'packaging', 'Packaging'
    SHIPPED = 'shipped', 'Shipped'
    IN_TRANSIT = 'in_transit', 'In Transit'
    OUT_FOR_DELIVERY = 'out_for_delivery', 'Out for Delivery'
    DELIVERED = 'delivered', 'Delivered'
    CANCELLED = 'cancelled', 'Cancelled'
    ON_HOLD = 'on_hold', 'On Hold'


class OrderQuerySet(SoftDeleteQuerySet):

    def for_customer(self, customer_id):
        return self.filter(customer_id=customer_id)

    def with_details(self):
        return self.select_related('customer', 'payment').prefetch_related('items', 'shipping_updates')


class Order(SoftDeleteModel):
    """
    Customer order.
    This is the key entity that links to ShipStream (shipping history) and
    PayGuard (payment sub-record). Line items carry prices snapshotted at
    creation; profit is always derived from the stored totals.
    """
    order_id = models.CharField(max_length=32, unique=True, db_index=True,
                                help_text="Human-readable order identifier")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='orders')

    # Shipping address
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20)
    address = models.TextField()
    city = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20, blank=True, default='')

    # Money
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    delivery_charge = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    delivery_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'),
                                        help_text="Courier cost borne by the shop")
    profit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), editable=False)

    order_status = models.CharField(max_length=30, choices=OrderStatus.choices,
                                    default=OrderStatus.AWAITING_PAYMENT, db_index=True)
    admin_notes = models.TextField(blank=True, default='')

    objects = OrderQuerySet.as_manager()

    class Meta(SoftDeleteModel.Meta):
        db_table = 'shopcore_orders'
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'

    def __str__(self):
        return f"Order {self.order_id} - {self.order_status}"

    @property
    def shipping_address(self) -> dict:
        return {
            'full_name': self.full_name,
            'phone': self.phone,
            'address': self.address,
            'city': self.city,
            'zip_code': self.zip_code,
        }

    def recompute_totals(self, items=None):
        """
        Recompute subtotal, grand total, total cost and profit from line items.
        Pass unsaved items during creation; otherwise the stored items are used.
        """
        if items is None:
            items = list(self.items.all())
        self.subtotal = sum((i.unit_price * i.quantity for i in items), Decimal('0.00'))
        self.total_cost = sum((i.unit_cost * i.quantity for i in items), Decimal('0.00'))
        self.grand_total = self.subtotal + self.delivery_charge
        self.profit = self.grand_total - self.total_cost - self.delivery_cost


class OrderItem(models.Model):
    """
    A line of an order with its price and cost frozen at order time.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    position = models.PositiveSmallIntegerField(default=0)
    title = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    color = models.CharField(max_length=50, blank=True, default='')
    size = models.CharField(max_length=50, blank=True, default='')

    class Meta:
        db_table = 'shopcore_order_items'
        ordering = ['position']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name='shopcore_item_quantity_min_1'),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.title}"

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def line_cost(self) -> Decimal:
        return self.unit_cost * self.quantity

    @property
    def profit_figures(self) -> dict:
        return profit_figures(self.unit_cost, self.unit_price)
