"""
PayMongo Payment Gateway Implementation.

E-wallet (GCash, GrabPay) checkout through the PayMongo Sources API:

1. POST /sources creates a source and returns the checkout URL.
2. The customer authorizes in the wallet; the source becomes ``chargeable``.
3. POST /payments charges the chargeable source.
"""
import asyncio
import hashlib
import hmac
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.application.interfaces import GatewaySource, IPaymentGateway, WebhookEvent
from core.domain.enums import PaymentResult
from core.domain.exceptions import InvalidWebhookSignature, PaymentGatewayError
from core.domain.value_objects import Money
from core.settings.modules.paymongo_settings import PayMongoSettings

logger = logging.getLogger(__name__)

# Source states that already carry a final answer
SOURCE_STATUS_MAP: Dict[str, PaymentResult] = {
    "pending": PaymentResult.PENDING,
    "paid": PaymentResult.PAID,
    "consumed": PaymentResult.PAID,
    "failed": PaymentResult.FAILED,
    "cancelled": PaymentResult.FAILED,
    "expired": PaymentResult.EXPIRED,
}

PAYMENT_STATUS_MAP: Dict[str, PaymentResult] = {
    "paid": PaymentResult.PAID,
    "pending": PaymentResult.PENDING,
    "failed": PaymentResult.FAILED,
}


def map_source_status(status: str) -> Optional[PaymentResult]:
    """PaymentResult for a source status, None for ``chargeable``."""
    if status == "chargeable":
        return None
    try:
        return SOURCE_STATUS_MAP[status]
    except KeyError:
        raise PaymentGatewayError(f"Unknown source status: {status}") from None


def verify_signature(payload: bytes, header: Optional[str], secret: str) -> bool:
    """
    Check a ``Paymongo-Signature`` header.

    The header looks like ``t=<timestamp>,te=<test sig>,li=<live sig>``;
    each signature is HMAC-SHA256 over ``<timestamp>.<raw body>``.
    """
    if not header:
        return False

    parts: Dict[str, str] = {}
    for chunk in header.split(","):
        key, _, value = chunk.strip().partition("=")
        parts[key] = value

    timestamp = parts.get("t")
    if not timestamp:
        return False

    expected = hmac.new(
        secret.encode("utf-8"),
        timestamp.encode("utf-8") + b"." + payload,
        hashlib.sha256,
    ).hexdigest()

    return any(
        hmac.compare_digest(expected, parts[key])
        for key in ("li", "te")
        if parts.get(key)
    )


def extract_source_id(event: Dict[str, Any]) -> Optional[str]:
    """Source id from a webhook event resource, whatever its type."""
    resource = event.get("data") or {}
    if resource.get("type") == "source":
        return resource.get("id")
    if resource.get("type") == "payment":
        source = (resource.get("attributes") or {}).get("source") or {}
        return source.get("id")
    return None


class PayMongoGateway(IPaymentGateway):
    """
    PayMongo implementation of the payment gateway.

    Every request carries an explicit timeout; transport failures and
    4xx/5xx answers surface as PaymentGatewayError.
    """

    def __init__(self, settings: PayMongoSettings):
        self.settings = settings
        self.base_url = settings.api_base_url.rstrip("/")
        self.auth = aiohttp.BasicAuth(settings.secret_key, "")
        self.timeout = aiohttp.ClientTimeout(total=settings.request_timeout_seconds)
        logger.info("PayMongoGateway initialized")

    async def create_source(self, amount: Money, method: str, reference: str) -> GatewaySource:
        payload = {
            "data": {
                "attributes": {
                    "amount": amount.to_minor_units(),
                    "currency": amount.currency,
                    "type": method,
                    "redirect": {
                        "success": self.settings.success_url,
                        "failed": self.settings.failed_url,
                    },
                    "metadata": {"order_id": reference},
                }
            }
        }
        data = await self._request("POST", "/sources", payload)

        attributes = data["attributes"]
        logger.info(f"PayMongo source {data['id']} created for order {reference}")
        return GatewaySource(
            source_id=data["id"],
            checkout_url=attributes["redirect"]["checkout_url"],
            status=map_source_status(attributes["status"]) or PaymentResult.PENDING,
        )

    async def get_source_status(self, source_id: str) -> PaymentResult:
        data = await self._request("GET", f"/sources/{source_id}")
        attributes = data["attributes"]

        result = map_source_status(attributes["status"])
        if result is not None:
            return result

        return await self._charge(source_id, attributes)

    def parse_webhook_event(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        if self.settings.webhook_secret and not verify_signature(
            payload, signature, self.settings.webhook_secret
        ):
            raise InvalidWebhookSignature()

        try:
            body = json.loads(payload)
            attributes = body["data"]["attributes"]
        except (ValueError, KeyError, TypeError):
            raise InvalidWebhookSignature("Malformed webhook payload") from None

        return WebhookEvent(
            event_type=attributes.get("type", "unknown"),
            source_id=extract_source_id(attributes),
        )

    async def _charge(self, source_id: str, attributes: Dict[str, Any]) -> PaymentResult:
        """Create the payment for a chargeable source."""
        payload = {
            "data": {
                "attributes": {
                    "amount": attributes["amount"],
                    "currency": attributes.get("currency", self.settings.currency),
                    "source": {"id": source_id, "type": "source"},
                    "description": f"Order {(attributes.get('metadata') or {}).get('order_id', source_id)}",
                }
            }
        }
        try:
            data = await self._request("POST", "/payments", payload)
        except PaymentGatewayError as e:
            if e.status is None or e.status >= 500:
                raise
            # A concurrent verification may have charged it first
            logger.warning(f"Charging source {source_id} rejected ({e}); re-reading source")
            refreshed = await self._request("GET", f"/sources/{source_id}")
            return map_source_status(refreshed["attributes"]["status"]) or PaymentResult.PENDING

        status = data["attributes"]["status"]
        logger.info(f"PayMongo payment {data['id']} for source {source_id}: {status}")
        return PAYMENT_STATUS_MAP.get(status, PaymentResult.PENDING)

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with aiohttp.ClientSession(auth=self.auth, timeout=self.timeout) as session:
                async with session.request(method, url, json=payload) as response:
                    body = await response.json(content_type=None)
                    if response.status >= 400:
                        detail = self._error_detail(body) or f"HTTP {response.status}"
                        logger.error(f"PayMongo {method} {path} failed: {response.status} - {detail}")
                        raise PaymentGatewayError(detail, status=response.status)
                    return body["data"]
        except aiohttp.ClientError as e:
            raise PaymentGatewayError(f"PayMongo unreachable: {e}") from e
        except asyncio.TimeoutError as e:
            raise PaymentGatewayError(f"PayMongo timed out after {self.timeout.total}s") from e

    @staticmethod
    def _error_detail(body: Any) -> Optional[str]:
        try:
            return body["errors"][0]["detail"]
        except (KeyError, IndexError, TypeError):
            return None
