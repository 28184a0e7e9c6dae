"""
Mock Notification Service Implementation.

Records notifications in memory instead of sending them. Used in
development when no Telegram bot is configured, and in tests.
"""
from typing import Any, Dict, List, Optional
import logging

from core.application.interfaces import INotificationService
from core.domain.entities.order import Order


logger = logging.getLogger(__name__)


class MockNotificationService(INotificationService):
    """
    Mock implementation of notification service.

    Logs notifications instead of actually sending them.
    """

    def __init__(self):
        """Initialize mock notification service."""
        self.notifications_sent: List[Dict[str, Any]] = []
        logger.info("MockNotificationService initialized (console logging)")

    async def send_order_confirmation(self, order: Order) -> None:
        self._record("order_confirmation", order_id=order.id, user_id=order.user_id,
                     message=f"Your order has been placed successfully. Order ID: {order.id}")

    async def send_order_cancelled(self, order: Order, reason: Optional[str] = None) -> None:
        self._record("order_cancelled", order_id=order.id, user_id=order.user_id, reason=reason)

    async def send_payment_received(self, order: Order, invoice_number: Optional[str] = None) -> None:
        self._record("payment_received", order_id=order.id, user_id=order.user_id,
                     invoice_number=invoice_number)

    async def send_low_stock_alert(self, product_id: int, product_name: str, remaining: int) -> None:
        self._record("low_stock", product_id=product_id, product_name=product_name,
                     remaining=remaining)

    async def notify(self, message: str, severity: int = 50) -> None:
        self._record("generic", message=message, severity=severity)

    def _record(self, kind: str, **fields: Any) -> None:
        notification = {"type": kind, **fields}
        self.notifications_sent.append(notification)
        logger.info(f"🔔 {kind.upper()} NOTIFICATION: {fields}")

    def get_notifications(self, kind: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get sent notifications, optionally filtered by type.

        Returns:
            List of notification dicts
        """
        if kind is None:
            return self.notifications_sent.copy()
        return [n for n in self.notifications_sent if n["type"] == kind]

    def clear(self) -> None:
        """Clear all recorded notifications."""
        self.notifications_sent.clear()
