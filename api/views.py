"""
API Views for the NexCart commerce backend

This module provides REST API endpoints for:
- Storefront: payment methods and public order tracking
- Customer orders: checkout, payment submission, cancellation
- Back office: payment verification, shipping updates, dashboard
- Health Check: System health and status
"""
import logging
from datetime import datetime, time

from django.conf import settings
from django.db import connection
from django.utils import timezone
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.backoffice.gateway import AdminGateway
from apps.core.exceptions import CustomerNotFoundException
from apps.core.results import Result
from apps.payguard import services as payments
from apps.shipstream import services as shipping
from apps.shopcore import ledger
from apps.shopcore.models import Customer
from .serializers import (
    AdminOrderSerializer,
    AdminOrderSummarySerializer,
    CreateOrderRequestSerializer,
    DashboardSerializer,
    DateRangeQuerySerializer,
    ErrorSerializer,
    HealthCheckSerializer,
    OrderSerializer,
    PaymentInstructionsSerializer,
    PaymentMethodsSerializer,
    RejectPaymentRequestSerializer,
    ShippingStatusRequestSerializer,
    SubmitPaymentRequestSerializer,
    TrackingSerializer,
    VerifyPaymentRequestSerializer,
)

logger = logging.getLogger(__name__)

ERRORS = {400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer, 409: ErrorSerializer}


def unwrap(result: Result):
    """Return the service value or raise its error for the exception handler to render."""
    return result.unwrap()


def customer_id_for(request):
    """The customer profile behind the logged-in account."""
    try:
        return request.user.customer_profile.pk
    except Customer.DoesNotExist:
        raise CustomerNotFoundException()


def _day_bounds(start, end):
    tz = timezone.get_current_timezone()
    return (
        timezone.make_aware(datetime.combine(start, time.min), tz),
        timezone.make_aware(datetime.combine(end, time.max), tz),
    )


# ---------------------------------------------------------------------------
# Storefront
# ---------------------------------------------------------------------------

class PaymentMethodsView(APIView):
    """
    Checkout configuration: enabled payment methods and where to pay.
    """
    permission_classes = [AllowAny]

    @extend_schema(
        responses={200: PaymentMethodsSerializer},
        description="List enabled payment methods with receiver details"
    )
    def get(self, request):
        return Response(unwrap(payments.list_payment_methods()), status=status.HTTP_200_OK)


class TrackOrderView(APIView):
    """
    Public order tracking by order ID. No personal or money data is returned.
    """
    permission_classes = [AllowAny]

    @extend_schema(
        responses={200: TrackingSerializer, 404: ErrorSerializer},
        description="Track an order by its public order ID"
    )
    def get(self, request, order_id):
        logger.info(f"Tracking request for {order_id}")
        return Response(unwrap(shipping.track_order_public(order_id)), status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Customer orders
# ---------------------------------------------------------------------------

class OrderListCreateView(APIView):
    """
    The logged-in customer's orders; POST places a new order.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={200: OrderSerializer(many=True)},
        description="List the current customer's orders, newest first"
    )
    def get(self, request):
        orders = unwrap(ledger.list_orders_for_user(customer_id_for(request)))
        return Response(OrderSerializer(orders, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        request=CreateOrderRequestSerializer,
        responses={201: OrderSerializer, **ERRORS},
        description="Place an order. Prices come from the catalog; declared_amount must match the total.",
        examples=[
            OpenApiExample(
                "bKash order",
                value={
                    "items": [{"product_id": "6f1c1a1e-0000-4000-8000-000000000001", "quantity": 2}],
                    "shipping_address": {
                        "full_name": "Rahim Uddin",
                        "phone": "01711000000",
                        "address": "House 12, Road 5, Dhanmondi",
                        "city": "Dhaka",
                    },
                    "delivery_charge": "60.00",
                    "payment_method": "bkash",
                    "declared_amount": "1060.00",
                    "transaction_id": "8N7A6B5C4D",
                },
                request_only=True
            ),
        ]
    )
    def post(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        customer_id = customer_id_for(request)
        logger.info(f"Order request from customer {customer_id}: {len(data['items'])} line(s), "
                    f"method={data['payment_method']}")

        order = unwrap(ledger.create_order(
            customer_id=customer_id,
            lines=data['items'],
            shipping_address=data['shipping_address'],
            delivery_charge=data['delivery_charge'],
            payment_method=data['payment_method'],
            declared_amount=data['declared_amount'],
            transaction_id=data.get('transaction_id') or None,
            sender_number=data.get('sender_number') or None,
        ))
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OrderSerializer, 404: ErrorSerializer})
    def get(self, request, order_id):
        order = unwrap(ledger.get_order(order_id, owner_id=customer_id_for(request)))
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class PaymentDetailsView(APIView):
    """
    Where and how much to pay for an order that is still unpaid.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentInstructionsSerializer, **ERRORS})
    def get(self, request, order_id):
        details = unwrap(payments.get_payment_instructions(order_id, owner_id=customer_id_for(request)))
        return Response(PaymentInstructionsSerializer(details).data, status=status.HTTP_200_OK)


class SubmitPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=SubmitPaymentRequestSerializer,
        responses={200: OrderSerializer, **ERRORS},
        description="Submit the transaction ID of a manual payment for verification"
    )
    def post(self, request, order_id):
        serializer = SubmitPaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = unwrap(payments.submit_payment(
            order_id,
            data['transaction_id'],
            method=data.get('method'),
            sender_number=data.get('sender_number'),
            customer_id=customer_id_for(request),
        ))
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class CancelOrderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: OrderSerializer, **ERRORS})
    def post(self, request, order_id):
        order = unwrap(shipping.cancel_order(order_id, customer_id_for(request)))
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Back office
# ---------------------------------------------------------------------------

class AdminView(APIView):
    """
    Base for back-office endpoints; hands out the admin gateway.
    """
    permission_classes = [IsAdminUser]

    def gateway(self, request) -> AdminGateway:
        return AdminGateway.for_user(request.user)


class AdminOrderListView(AdminView):

    @extend_schema(
        parameters=[
            OpenApiParameter('start', str, description="First day (YYYY-MM-DD)"),
            OpenApiParameter('end', str, description="Last day (YYYY-MM-DD)"),
            OpenApiParameter('include_deleted', bool),
        ],
        responses={200: AdminOrderSummarySerializer(many=True)},
        description="Orders created within a date range (all orders without a range)"
    )
    def get(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        start = end = None
        if params.get('start'):
            start, end = _day_bounds(params['start'], params['end'])
        orders = unwrap(self.gateway(request).orders_between(
            start, end, include_deleted=params['include_deleted']
        ))
        return Response(AdminOrderSummarySerializer(orders, many=True).data, status=status.HTTP_200_OK)


class AdminPendingOrdersView(AdminView):

    @extend_schema(
        responses={200: AdminOrderSummarySerializer(many=True)},
        description="Orders whose submitted payment awaits verification, oldest first"
    )
    def get(self, request):
        orders = unwrap(self.gateway(request).pending_verification())
        return Response(AdminOrderSummarySerializer(orders, many=True).data, status=status.HTTP_200_OK)


class AdminOrderDetailView(AdminView):

    @extend_schema(responses={200: AdminOrderSerializer, 404: ErrorSerializer})
    def get(self, request, order_id):
        include_deleted = request.query_params.get('include_deleted', '').lower() in ('1', 'true')
        order = unwrap(self.gateway(request).get_order(order_id, include_deleted=include_deleted))
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(responses={204: None, 404: ErrorSerializer}, description="Soft-delete an order")
    def delete(self, request, order_id):
        unwrap(self.gateway(request).soft_delete_order(order_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminVerifyPaymentView(AdminView):

    @extend_schema(request=VerifyPaymentRequestSerializer, responses={200: AdminOrderSerializer, **ERRORS})
    def patch(self, request, order_id):
        serializer = VerifyPaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = unwrap(self.gateway(request).verify_payment(
            order_id, admin_notes=serializer.validated_data.get('admin_notes')
        ))
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)


class AdminRejectPaymentView(AdminView):

    @extend_schema(request=RejectPaymentRequestSerializer, responses={200: AdminOrderSerializer, **ERRORS})
    def patch(self, request, order_id):
        serializer = RejectPaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = unwrap(self.gateway(request).reject_payment(order_id, serializer.validated_data['reason']))
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)


class AdminShippingStatusView(AdminView):

    @extend_schema(request=ShippingStatusRequestSerializer, responses={200: AdminOrderSerializer, **ERRORS})
    def patch(self, request, order_id):
        serializer = ShippingStatusRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = unwrap(self.gateway(request).update_shipping_status(
            order_id, data['status'], notes=data.get('notes')
        ))
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)


class AdminDashboardView(AdminView):

    @extend_schema(responses={200: DashboardSerializer})
    def get(self, request):
        summary = unwrap(self.gateway(request).dashboard())
        return Response(DashboardSerializer(summary).data, status=status.HTTP_200_OK)


class HealthCheckView(APIView):
    """
    System health check endpoint.

    Returns the status of the API, database connectivity,
    and whether notification email is configured.
    """
    permission_classes = [AllowAny]

    @extend_schema(
        responses={200: HealthCheckSerializer},
        description="Check system health status"
    )
    def get(self, request):
        """
        Check system health.
        """
        # Check database connectivity
        db_status = "healthy"
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except Exception as e:
            logger.error(f"Health check database error: {e}")
            db_status = "unhealthy"

        notifications = getattr(settings, 'NOTIFICATIONS', {})
        notifications_status = "configured" if notifications.get('ADMIN_EMAIL') else "not configured"

        response_data = {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": "1.0.0",
            "database": db_status,
            "notifications": notifications_status,
            "timestamp": timezone.now().isoformat()
        }

        return Response(response_data, status=status.HTTP_200_OK)
