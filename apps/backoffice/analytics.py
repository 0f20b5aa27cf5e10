"""
Admin dashboard figures.

Sales figures only count orders whose payment is verified and which are
not soft-deleted.
"""
from decimal import Decimal
from typing import Dict

from django.db.models import Sum
from django.db.models.functions import Coalesce

from apps.core.capabilities import require_admin
from apps.core.results import service_operation
from apps.payguard.models import PaymentStatus
from apps.shopcore.models import Customer, Order, OrderStatus, Product

ZERO = Decimal('0.00')


def verified_sales() -> Dict[str, Decimal]:
    totals = (
        Order.objects.visible()
        .filter(payment__status=PaymentStatus.VERIFIED)
        .aggregate(
            total_sell=Coalesce(Sum('grand_total'), ZERO),
            total_buy=Coalesce(Sum('total_cost'), ZERO),
            total_profit=Coalesce(Sum('profit'), ZERO),
        )
    )
    sell = totals['total_sell']
    profit_percent = (totals['total_profit'] / sell * 100) if sell > 0 else ZERO
    totals['profit_percent'] = profit_percent.quantize(Decimal('0.01'))
    return totals


@service_operation("dashboard_summary")
def dashboard_summary(admin) -> Dict:
    require_admin(admin)
    orders = Order.objects.visible()
    return {
        'sales': verified_sales(),
        'counts': {
            'total_orders': orders.count(),
            'pending_orders': orders.filter(order_status=OrderStatus.AWAITING_VERIFICATION).count(),
            'total_customers': Customer.objects.count(),
            'total_products': Product.objects.visible().filter(status=Product.Status.ACTIVE).count(),
        },
    }
