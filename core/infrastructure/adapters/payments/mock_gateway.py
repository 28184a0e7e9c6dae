"""
Mock Payment Gateway Implementation.

In-memory stand-in for PayMongo used in development and tests.
Sources start pending; ``set_status`` plays the customer's part.
"""
import itertools
import json
import logging
from typing import Dict, List, Optional

from core.application.interfaces import GatewaySource, IPaymentGateway, WebhookEvent
from core.domain.enums import PaymentResult
from core.domain.exceptions import InvalidWebhookSignature, PaymentGatewayError
from core.domain.value_objects import Money

logger = logging.getLogger(__name__)


class MockPaymentGateway(IPaymentGateway):

    def __init__(self, checkout_base_url: str = "https://checkout.mock.local"):
        self.checkout_base_url = checkout_base_url
        self.sources: Dict[str, Dict] = {}
        self.status_checks: List[str] = []
        self.fail_next_call: Optional[str] = None
        self._ids = itertools.count(1)
        logger.info("MockPaymentGateway initialized (no real charges)")

    async def create_source(self, amount: Money, method: str, reference: str) -> GatewaySource:
        self._maybe_fail()
        source_id = f"src_mock_{next(self._ids):06d}"
        self.sources[source_id] = {
            "amount": amount,
            "method": method,
            "reference": reference,
            "status": PaymentResult.PENDING,
        }
        logger.info(f"Mock source {source_id} for order {reference}: {amount}")
        return GatewaySource(
            source_id=source_id,
            checkout_url=f"{self.checkout_base_url}/{source_id}",
        )

    async def get_source_status(self, source_id: str) -> PaymentResult:
        self._maybe_fail()
        self.status_checks.append(source_id)
        try:
            return self.sources[source_id]["status"]
        except KeyError:
            raise PaymentGatewayError(f"No such source: {source_id}", status=404) from None

    def parse_webhook_event(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        try:
            body = json.loads(payload)
        except ValueError:
            raise InvalidWebhookSignature("Malformed webhook payload") from None
        return WebhookEvent(event_type=body.get("type", "unknown"), source_id=body.get("source_id"))

    def set_status(self, source_id: str, status: PaymentResult) -> None:
        self.sources[source_id]["status"] = status

    def fail_next(self, message: str = "Mock gateway unavailable") -> None:
        """Make the next gateway call raise PaymentGatewayError."""
        self.fail_next_call = message

    def _maybe_fail(self) -> None:
        if self.fail_next_call:
            message, self.fail_next_call = self.fail_next_call, None
            raise PaymentGatewayError(message, status=503)
