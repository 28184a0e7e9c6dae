"""Application layer interfaces."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from core.domain.entities.order import Order
from core.domain.enums import PaymentResult
from core.domain.value_objects import Money


@dataclass(frozen=True)
class GatewaySource:
    """Checkout session created at the payment gateway."""
    source_id: str
    checkout_url: str
    status: PaymentResult = PaymentResult.PENDING


@dataclass(frozen=True)
class WebhookEvent:
    """Gateway notification reduced to what settlement needs."""
    event_type: str
    source_id: Optional[str] = None


class IPaymentGateway(ABC):
    """
    Interface for the external payment gateway.

    Implementations talk HTTP and must never be called while a database
    transaction holds row locks.
    """

    @abstractmethod
    async def create_source(self, amount: Money, method: str, reference: str) -> GatewaySource:
        """
        Create a redirect-based payment source.

        Args:
            amount: Amount to charge
            method: E-wallet type (gcash, grab_pay)
            reference: Order id, echoed in gateway metadata

        Returns:
            GatewaySource with the URL the customer is sent to

        Raises:
            PaymentGatewayError: Gateway unreachable or request rejected
        """
        pass

    @abstractmethod
    async def get_source_status(self, source_id: str) -> PaymentResult:
        """
        Current outcome of a source.

        A source the customer has authorized is charged here, so the
        returned value is final except for ``PENDING``.

        Raises:
            PaymentGatewayError: Gateway unreachable or request rejected
        """
        pass

    @abstractmethod
    def parse_webhook_event(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        """
        Authenticate and decode a webhook delivery.

        Raises:
            InvalidWebhookSignature: Signature missing or wrong
        """
        pass


class INotificationService(ABC):
    """
    Interface for notification service operations.

    Delivery is best effort: callers catch and log failures, and no
    business operation waits on a notification succeeding.
    """

    @abstractmethod
    async def send_order_confirmation(self, order: Order) -> None:
        pass

    @abstractmethod
    async def send_order_cancelled(self, order: Order, reason: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def send_payment_received(self, order: Order, invoice_number: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def send_low_stock_alert(self, product_id: int, product_name: str, remaining: int) -> None:
        """
        Alert staff that a product reached its reorder threshold.

        Args:
            product_id: Product id
            product_name: Display name
            remaining: Units left after the order
        """
        pass

    async def notify(self, message: str, severity: int = 50) -> None:
        """
        Send a generic notification message.

        Args:
            message: Notification message
            severity: Severity level (0-100, higher = more critical)
        """
        # Default implementation - can be overridden
        pass


class IDocumentStore(ABC):
    """Blob storage for generated documents."""

    @abstractmethod
    async def save(self, name: str, content: bytes) -> str:
        """
        Store a document.

        Returns:
            Location of the stored document
        """
        pass


__all__ = [
    "GatewaySource",
    "WebhookEvent",
    "IPaymentGateway",
    "INotificationService",
    "IDocumentStore",
]
