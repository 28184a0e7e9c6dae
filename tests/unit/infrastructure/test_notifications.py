"""Unit tests for notification adapters."""
from decimal import Decimal

import pytest

from core.domain.entities.order import Order, OrderItem, ShippingAddress
from core.domain.services.pricing import compute_breakdown
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.notifications.telegram_notification_service import (
    TelegramNotificationService,
)
from core.settings.modules.integrations_settings import TelegramSettings


@pytest.fixture
def order() -> Order:
    return Order.place(
        user_id="user-7",
        items=[OrderItem(product_id=2, product_name="Amoxicillin 500mg", quantity=3,
                         unit_price=Decimal("450.00"))],
        shipping_address=ShippingAddress(street="1 Rizal Ave", city="Cebu", country="PH"),
        shipping_method_id=1,
        payment_method="gcash",
        breakdown=compute_breakdown(Decimal("1350.00"), Decimal("0"), Decimal("50.00"), Decimal("12")),
    )


@pytest.fixture
def telegram(monkeypatch):
    service = TelegramNotificationService(
        TelegramSettings(DOSE_TELEGRAM_ENABLED=True, TELEGRAM_BOT_TOKEN="123:abc",
                         TELEGRAM_CHAT_ID=42, DOSE_TELEGRAM_PREFIX="[TEST]")
    )
    sent = []

    async def capture(text):
        sent.append(text)

    monkeypatch.setattr(service, "_send_message", capture)
    service.sent = sent
    return service


@pytest.mark.asyncio
async def test_mock_records_by_type(order):
    service = MockNotificationService()

    await service.send_order_confirmation(order)
    await service.send_low_stock_alert(2, "Amoxicillin 500mg", 2)
    await service.send_payment_received(order, "INV-202506-000001")

    assert len(service.get_notifications()) == 3
    low = service.get_notifications("low_stock")
    assert low == [{"type": "low_stock", "product_id": 2,
                    "product_name": "Amoxicillin 500mg", "remaining": 2}]
    assert service.get_notifications("payment_received")[0]["invoice_number"] == "INV-202506-000001"

    service.clear()
    assert service.get_notifications() == []


@pytest.mark.asyncio
async def test_telegram_payment_message(telegram, order):
    await telegram.send_payment_received(order, "INV-202506-000001")

    (text,) = telegram.sent
    assert "Payment Received" in text
    assert order.id in text
    assert "1568.00 PHP" in text
    assert "INV-202506-000001" in text


@pytest.mark.asyncio
async def test_telegram_cancel_message_includes_reason(telegram, order):
    await telegram.send_order_cancelled(order, reason="payment timeout")
    assert "Reason: payment timeout" in telegram.sent[0]


@pytest.mark.asyncio
async def test_telegram_without_credentials_skips_silently(order):
    service = TelegramNotificationService(TelegramSettings(TELEGRAM_BOT_TOKEN="", TELEGRAM_CHAT_ID=None))
    await service.send_order_confirmation(order)
