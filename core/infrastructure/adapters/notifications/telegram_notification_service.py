"""
Telegram Notification Service Implementation.

Posts order and stock events to the pharmacy staff chat via the
Telegram Bot API.
"""
from typing import Optional
import logging
import aiohttp

from core.application.interfaces import INotificationService
from core.domain.entities.order import Order
from core.settings.modules.integrations_settings import TelegramSettings


logger = logging.getLogger(__name__)


class TelegramNotificationService(INotificationService):
    """
    Telegram implementation of notification service.

    Delivery problems are logged here and never raised.
    """

    def __init__(self, settings: TelegramSettings):
        """
        Initialize Telegram notification service.

        Args:
            settings: Telegram settings with bot token and chat ID
        """
        self.bot_token = settings.token
        self.chat_id = settings.chat_id
        self.prefix = settings.prefix
        self.timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)
        self.api_url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        logger.info("TelegramNotificationService initialized")

    async def send_order_confirmation(self, order: Order) -> None:
        text = (
            f"🛒 *Order Confirmation*\n"
            f"Order: `{order.id}`\n"
            f"Customer: `{order.user_id}`\n"
            f"Items: {sum(item.quantity for item in order.items)}\n"
            f"Total: {order.total} {order.currency}"
        )
        await self._send_message(text)

    async def send_order_cancelled(self, order: Order, reason: Optional[str] = None) -> None:
        text = (
            f"🚫 *Order Cancelled*\n"
            f"Order: `{order.id}`\n"
            f"Customer: `{order.user_id}`"
        )
        if reason:
            text += f"\nReason: {reason}"
        await self._send_message(text)

    async def send_payment_received(self, order: Order, invoice_number: Optional[str] = None) -> None:
        text = (
            f"✅ *Payment Received*\n"
            f"Order: `{order.id}`\n"
            f"Amount: {order.total} {order.currency}"
        )
        if invoice_number:
            text += f"\nInvoice: `{invoice_number}`"
        await self._send_message(text)

    async def send_low_stock_alert(self, product_id: int, product_name: str, remaining: int) -> None:
        text = (
            f"⚠️ *Low Stock*\n"
            f"{product_name} (#{product_id}) is down to {remaining} unit(s)"
        )
        await self._send_message(text)

    async def notify(self, message: str, severity: int = 50) -> None:
        """
        Send a generic notification message.

        Args:
            message: Notification message
            severity: Severity level (0-100, higher = more critical)
        """
        emoji = "🔴" if severity >= 80 else "🟡" if severity >= 50 else "🟢"
        await self._send_message(f"{emoji} {message}")

    async def _send_message(self, text: str) -> None:
        """
        Send message to Telegram.

        Args:
            text: Message text (supports Markdown)
        """
        if not self.bot_token or not self.chat_id:
            logger.warning("Telegram bot_token or chat_id not configured, skipping notification")
            return

        payload = {
            "chat_id": self.chat_id,
            "text": f"{self.prefix} {text}",
            "parse_mode": "Markdown",
        }
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.api_url, json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(
                            f"Telegram API error: {response.status} - {error_text}"
                        )
                    else:
                        logger.info("Telegram notification sent successfully")
        except aiohttp.ClientError as e:
            logger.error(f"Failed to send Telegram notification: {e}", exc_info=True)
