"""
API URL Configuration
"""
from django.urls import path
from .views import (
    AdminDashboardView,
    AdminOrderDetailView,
    AdminOrderListView,
    AdminPendingOrdersView,
    AdminRejectPaymentView,
    AdminShippingStatusView,
    AdminVerifyPaymentView,
    CancelOrderView,
    HealthCheckView,
    OrderDetailView,
    OrderListCreateView,
    PaymentDetailsView,
    PaymentMethodsView,
    SubmitPaymentView,
    TrackOrderView,
)

app_name = 'api'

urlpatterns = [
    # Storefront
    path('payment-methods/', PaymentMethodsView.as_view(), name='payment-methods'),
    path('track/<str:order_id>/', TrackOrderView.as_view(), name='track-order'),

    # Customer orders
    path('orders/', OrderListCreateView.as_view(), name='orders'),
    path('orders/<str:order_id>/', OrderDetailView.as_view(), name='order-detail'),
    path('orders/<str:order_id>/payment-details/', PaymentDetailsView.as_view(), name='payment-details'),
    path('orders/<str:order_id>/payment/', SubmitPaymentView.as_view(), name='submit-payment'),
    path('orders/<str:order_id>/cancel/', CancelOrderView.as_view(), name='cancel-order'),

    # Back office
    path('admin/orders/', AdminOrderListView.as_view(), name='admin-orders'),
    path('admin/orders/pending/', AdminPendingOrdersView.as_view(), name='admin-pending-orders'),
    path('admin/orders/<str:order_id>/', AdminOrderDetailView.as_view(), name='admin-order-detail'),
    path('admin/orders/<str:order_id>/verify/', AdminVerifyPaymentView.as_view(), name='admin-verify-payment'),
    path('admin/orders/<str:order_id>/reject/', AdminRejectPaymentView.as_view(), name='admin-reject-payment'),
    path('admin/orders/<str:order_id>/shipping/', AdminShippingStatusView.as_view(), name='admin-shipping-status'),
    path('admin/dashboard/', AdminDashboardView.as_view(), name='admin-dashboard'),

    # Health check
    path('health/', HealthCheckView.as_view(), name='health'),
]
