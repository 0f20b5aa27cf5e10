"""
API Serializers for Request/Response handling
"""
from rest_framework import serializers

from apps.payguard.models import PaymentMethod
from apps.shopcore.models import OrderStatus


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class CartLineSerializer(serializers.Serializer):
    """
    One cart line. Prices are never accepted from the client.
    """
    product_id = serializers.CharField(max_length=64, help_text="Catalog product identifier")
    quantity = serializers.IntegerField(min_value=1)
    color = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    size = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')


class ShippingAddressSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=20)
    address = serializers.CharField()
    city = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')


class CreateOrderRequestSerializer(serializers.Serializer):
    """
    Request serializer for order creation.
    """
    items = CartLineSerializer(many=True, allow_empty=False)
    shipping_address = ShippingAddressSerializer()
    delivery_charge = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    declared_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2,
        help_text="Total the customer is paying; must equal the server-side grand total"
    )
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    sender_number = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)


class SubmitPaymentRequestSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(max_length=100)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    sender_number = serializers.CharField(max_length=30, required=False, allow_blank=True)


class VerifyPaymentRequestSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(required=False, allow_blank=True)


class RejectPaymentRequestSerializer(serializers.Serializer):
    reason = serializers.CharField()


class ShippingStatusRequestSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True)


class DateRangeQuerySerializer(serializers.Serializer):
    """
    Query parameters for the admin calendar listing.
    """
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    include_deleted = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if bool(attrs.get('start')) != bool(attrs.get('end')):
            raise serializers.ValidationError("Provide both start and end, or neither.")
        return attrs


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class OrderItemSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    title = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    color = serializers.CharField()
    size = serializers.CharField()


class AdminOrderItemSerializer(OrderItemSerializer):
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    unit_profit = serializers.DecimalField(max_digits=12, decimal_places=2, source='profit_figures.profit_amount')
    profit_percent = serializers.DecimalField(max_digits=7, decimal_places=2, source='profit_figures.profit_percent')


class PaymentSerializer(serializers.Serializer):
    method = serializers.CharField()
    method_label = serializers.CharField(source='get_method_display')
    status = serializers.CharField()
    transaction_id = serializers.CharField(allow_null=True)
    sender_number = serializers.CharField()
    receiver_reference = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    submitted_at = serializers.DateTimeField(allow_null=True)
    verified_at = serializers.DateTimeField(allow_null=True)


class AdminPaymentSerializer(PaymentSerializer):
    verified_by = serializers.CharField()
    failure_reason = serializers.CharField()


class ShippingUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()
    label = serializers.CharField(source='get_status_display')
    notes = serializers.CharField()
    timestamp = serializers.DateTimeField()


class OrderSerializer(serializers.Serializer):
    """
    Customer view of an order. Costs and profit are never included.
    """
    order_id = serializers.CharField()
    order_status = serializers.CharField()
    order_status_label = serializers.CharField(source='get_order_status_display')
    shipping_address = serializers.DictField()
    items = OrderItemSerializer(many=True, source='items.all')
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    delivery_charge = serializers.DecimalField(max_digits=12, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment = PaymentSerializer()
    shipping_updates = ShippingUpdateSerializer(many=True, source='shipping_updates.all')
    created_at = serializers.DateTimeField()


class AdminOrderSerializer(OrderSerializer):
    """
    Back-office view of an order including cost and profit.
    """
    customer_id = serializers.CharField()
    customer_email = serializers.EmailField(source='customer.email')
    items = AdminOrderItemSerializer(many=True, source='items.all')
    payment = AdminPaymentSerializer()
    total_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    delivery_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    profit = serializers.DecimalField(max_digits=12, decimal_places=2)
    admin_notes = serializers.CharField()
    is_deleted = serializers.BooleanField()


class AdminOrderSummarySerializer(serializers.Serializer):
    """
    Row of the admin listings; no items or history.
    """
    order_id = serializers.CharField()
    customer_email = serializers.EmailField(source='customer.email')
    full_name = serializers.CharField()
    order_status = serializers.CharField()
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    profit = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.CharField(source='payment.method')
    payment_status = serializers.CharField(source='payment.status')
    transaction_id = serializers.CharField(source='payment.transaction_id', allow_null=True)
    submitted_at = serializers.DateTimeField(source='payment.submitted_at', allow_null=True)
    created_at = serializers.DateTimeField()
    is_deleted = serializers.BooleanField()


class TrackingSerializer(serializers.Serializer):
    """
    Public tracking payload.
    """
    order_id = serializers.CharField()
    order_status = serializers.CharField()
    order_status_label = serializers.CharField()
    shipping_updates = serializers.ListField(child=serializers.DictField())
    created_at = serializers.CharField()
    is_delivered = serializers.BooleanField()
    delivered_at = serializers.CharField(allow_null=True)


class PaymentInstructionsSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    reference = serializers.CharField()
    method = serializers.CharField()
    details = serializers.DictField()


class PaymentMethodsSerializer(serializers.Serializer):
    currency = serializers.CharField()
    supported = serializers.ListField(child=serializers.CharField())
    methods = serializers.DictField()
    configured = serializers.BooleanField()


class SalesSerializer(serializers.Serializer):
    total_sell = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_buy = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_profit = serializers.DecimalField(max_digits=14, decimal_places=2)
    profit_percent = serializers.DecimalField(max_digits=7, decimal_places=2)


class DashboardSerializer(serializers.Serializer):
    sales = SalesSerializer()
    counts = serializers.DictField(child=serializers.IntegerField())


class ErrorSerializer(serializers.Serializer):
    error = serializers.BooleanField()
    kind = serializers.CharField()
    message = serializers.CharField()
    status_code = serializers.IntegerField()


class HealthCheckSerializer(serializers.Serializer):
    """
    Response serializer for health check.
    """
    status = serializers.CharField()
    version = serializers.CharField()
    database = serializers.CharField()
    notifications = serializers.CharField()
    timestamp = serializers.CharField()
