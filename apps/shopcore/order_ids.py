"""
Human-readable order identifiers: <PREFIX>-YYYYMMDD-NNNN
"""
from datetime import datetime, time, timedelta

from django.conf import settings
from django.utils import timezone

from .models import Order


def order_id_prefix() -> str:
    return getattr(settings, 'ORDER_ID_PREFIX', 'NCBD')


def generate_order_id(now: datetime = None, attempt: int = 0) -> str:
    """
    Date prefix plus a sequence derived from today's order count.

    ``attempt`` pushes the sequence forward after a collision, so a retry
    does not reproduce the identifier that just lost the race.
    """
    now = timezone.localtime(now or timezone.now())
    start_of_day = timezone.make_aware(datetime.combine(now.date(), time.min), now.tzinfo)
    today_count = Order.objects.filter(
        created_at__gte=start_of_day,
        created_at__lt=start_of_day + timedelta(days=1),
    ).count()
    sequence = today_count + 1 + attempt
    return f"{order_id_prefix()}-{now:%Y%m%d}-{sequence:04d}"
