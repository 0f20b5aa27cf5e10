"""
Notification Sink - fire-and-forget order emails

This module implements:
1. notify(): queue an email for an order event after the surrounding
   transaction commits
2. Bounded background delivery on a small thread pool
3. Error containment: nothing here ever raises into the caller
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Optional, Union

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from .messages import NotificationKind, build_admin_message, build_customer_message

logger = logging.getLogger(__name__)

ADMIN = "admin"

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = Lock()


def _config() -> dict:
    return getattr(settings, 'NOTIFICATIONS', {})


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=_config().get('MAX_WORKERS', 2),
                thread_name_prefix='notify',
            )
        return _executor


def _deliver(subject: str, body: str, to: str, kind: NotificationKind, order_ref: str) -> bool:
    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to],
            fail_silently=False,
        )
        logger.info(f"{kind.value} email sent to {to} for order {order_ref}")
        return True
    except Exception as e:
        logger.error(f"Failed to send {kind.value} email for order {order_ref}: {e}", exc_info=True)
        return False


def _dispatch(kind: NotificationKind, order, recipient, notes: str) -> None:
    try:
        if recipient == ADMIN:
            to = _config().get('ADMIN_EMAIL')
            if not to:
                logger.warning("Admin notification email is not configured, skipping")
                return
            subject, body = build_admin_message(kind, order, notes)
        else:
            to = getattr(recipient, 'email', None)
            if not to:
                logger.warning(f"Customer for order {order.order_id} has no email, skipping")
                return
            subject, body = build_customer_message(kind, order, recipient, notes)

        if _config().get('ASYNC', True):
            _get_executor().submit(_deliver, subject, body, to, kind, order.order_id)
        else:
            _deliver(subject, body, to, kind, order.order_id)
    except Exception as e:
        logger.error(f"Could not queue {kind.value} notification for order "
                     f"{getattr(order, 'order_id', '?')}: {e}", exc_info=True)


def notify(kind: NotificationKind, order, recipient: Union[str, object], notes: str = '') -> None:
    """
    Queue a notification; runs once the current transaction commits.
    Never raises, so a failing mail provider cannot undo or block a transition.
    """
    try:
        transaction.on_commit(lambda: _dispatch(kind, order, recipient, notes))
    except Exception as e:
        logger.error(f"Could not schedule {kind} notification: {e}", exc_info=True)
