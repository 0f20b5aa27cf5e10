"""
Admin Verification Gateway

The privileged entry point for back-office staff. It holds the admin
capability and forwards to the ledger, reconciliation and shipping
services, which do the actual work.
"""
import logging
from datetime import datetime
from typing import Optional

from apps.core.capabilities import AuthenticatedAdmin, require_admin
from apps.core.results import Result
from apps.payguard import services as payments
from apps.shipstream import services as shipping
from apps.shopcore import ledger
from . import analytics

logger = logging.getLogger(__name__)


class AdminGateway:
    """
    Admin-only operations bound to one authenticated admin.
    """

    def __init__(self, admin: AuthenticatedAdmin):
        self.admin = require_admin(admin)

    @classmethod
    def for_user(cls, user) -> "AdminGateway":
        return cls(AuthenticatedAdmin.from_user(user))

    def pending_verification(self, include_deleted: bool = False) -> Result:
        return payments.list_orders_pending_verification(include_deleted=include_deleted)

    def verify_payment(self, order_id: str, admin_notes: Optional[str] = None) -> Result:
        logger.info(f"[{self.admin}] verifying payment for {order_id}")
        return payments.verify_payment(order_id, self.admin, admin_notes=admin_notes)

    def reject_payment(self, order_id: str, reason: str) -> Result:
        logger.info(f"[{self.admin}] rejecting payment for {order_id}")
        return payments.reject_payment(order_id, self.admin, reason)

    def update_shipping_status(self, order_id: str, new_status: str, notes: Optional[str] = None) -> Result:
        logger.info(f"[{self.admin}] setting {order_id} to {new_status}")
        return shipping.update_shipping_status(order_id, new_status, self.admin, notes=notes)

    def soft_delete_order(self, order_id: str) -> Result:
        return ledger.soft_delete_order(order_id, self.admin)

    def orders_between(self, start: Optional[datetime] = None, end: Optional[datetime] = None,
                       include_deleted: bool = False) -> Result:
        return ledger.list_orders_between(self.admin, start, end, include_deleted=include_deleted)

    def get_order(self, order_id: str, include_deleted: bool = False) -> Result:
        return ledger.get_order(order_id, include_deleted=include_deleted)

    def dashboard(self) -> Result:
        return analytics.dashboard_summary(self.admin)
