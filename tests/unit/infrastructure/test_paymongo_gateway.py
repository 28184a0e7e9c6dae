"""Unit tests for the PayMongo adapter's pure parts: status mapping and webhooks."""
import hashlib
import hmac
import json

import pytest

from core.domain.enums import PaymentResult
from core.domain.exceptions import InvalidWebhookSignature, PaymentGatewayError
from core.domain.value_objects import Money
from core.infrastructure.adapters.payments.paymongo_gateway import (
    PayMongoGateway,
    extract_source_id,
    map_source_status,
    verify_signature,
)
from core.settings.modules.paymongo_settings import PayMongoSettings

SECRET = "whsk_test_secret"


def sign(payload: bytes, timestamp: str = "1700000000", secret: str = SECRET) -> str:
    return hmac.new(
        secret.encode("utf-8"), timestamp.encode("utf-8") + b"." + payload, hashlib.sha256
    ).hexdigest()


def webhook_body(event_type: str, resource: dict) -> bytes:
    return json.dumps(
        {"data": {"id": "evt_1", "type": "event",
                  "attributes": {"type": event_type, "data": resource}}}
    ).encode("utf-8")


@pytest.fixture
def gateway() -> PayMongoGateway:
    return PayMongoGateway(PayMongoSettings(secret_key="sk_test_123", webhook_secret=SECRET))


class TestSourceStatus:

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("pending", PaymentResult.PENDING),
            ("paid", PaymentResult.PAID),
            ("consumed", PaymentResult.PAID),
            ("failed", PaymentResult.FAILED),
            ("cancelled", PaymentResult.FAILED),
            ("expired", PaymentResult.EXPIRED),
        ],
    )
    def test_known_statuses(self, status, expected):
        assert map_source_status(status) is expected

    def test_chargeable_needs_a_charge(self):
        assert map_source_status("chargeable") is None

    def test_unknown_status_is_a_gateway_error(self):
        with pytest.raises(PaymentGatewayError):
            map_source_status("mystery")


class TestSignature:

    def test_live_signature(self):
        payload = b'{"data": {}}'
        header = f"t=1700000000,te=,li={sign(payload)}"
        assert verify_signature(payload, header, SECRET)

    def test_test_mode_signature(self):
        payload = b'{"data": {}}'
        header = f"t=1700000000,te={sign(payload)},li="
        assert verify_signature(payload, header, SECRET)

    def test_tampered_body(self):
        header = f"t=1700000000,te={sign(b'original')},li="
        assert not verify_signature(b"tampered", header, SECRET)

    def test_wrong_secret(self):
        payload = b"{}"
        header = f"t=1700000000,te={sign(payload, secret='other')},li="
        assert not verify_signature(payload, header, SECRET)

    @pytest.mark.parametrize("header", [None, "", "te=abc,li=def"])
    def test_missing_parts(self, header):
        assert not verify_signature(b"{}", header, SECRET)


class TestWebhookParsing:

    def test_source_resource(self):
        assert extract_source_id({"data": {"id": "src_1", "type": "source"}}) == "src_1"

    def test_payment_resource_points_at_its_source(self):
        resource = {"data": {"id": "pay_1", "type": "payment",
                             "attributes": {"source": {"id": "src_2", "type": "gcash"}}}}
        assert extract_source_id(resource) == "src_2"

    def test_other_resource(self):
        assert extract_source_id({"data": {"id": "cs_1", "type": "checkout_session"}}) is None

    def test_signed_event(self, gateway):
        payload = webhook_body("source.chargeable", {"id": "src_abc", "type": "source"})
        event = gateway.parse_webhook_event(payload, f"t=1700000000,te={sign(payload)},li=")

        assert event.event_type == "source.chargeable"
        assert event.source_id == "src_abc"

    def test_bad_signature_rejected(self, gateway):
        payload = webhook_body("payment.paid", {"id": "pay_1", "type": "payment"})
        with pytest.raises(InvalidWebhookSignature):
            gateway.parse_webhook_event(payload, "t=1700000000,te=deadbeef,li=")

    def test_malformed_payload_rejected(self, gateway):
        payload = b"not json"
        with pytest.raises(InvalidWebhookSignature):
            gateway.parse_webhook_event(payload, f"t=1700000000,te={sign(payload)},li=")


def test_amount_in_centavos():
    assert Money(amount="1064.00").to_minor_units() == 106400


def test_redirect_urls_follow_frontend_url():
    settings = PayMongoSettings(secret_key="sk", FRONTEND_URL="https://dose.example/")
    assert settings.enabled
    assert settings.success_url == "https://dose.example/payment/success"
    assert settings.failed_url == "https://dose.example/payment/failed"
