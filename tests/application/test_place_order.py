"""Application tests for atomic order placement."""
import asyncio
from decimal import Decimal

import pytest

from core.application.services import OrderApplicationService
from core.data.models import CouponModel, OrderEventModel, OrderModel
from core.domain.enums import OrderStatus
from core.domain.exceptions import (
    CouponNotFound,
    InsufficientStock,
    InvalidShippingMethod,
    MinimumNotMet,
    ProductNotFound,
)
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.settings.modules.checkout_settings import CheckoutSettings

PARACETAMOL = 1   # 100.00, 50 in stock
AMOXICILLIN = 2   # 450.00, 5 in stock, reorder threshold 3
VITAMIN_C = 3     # 250.00, 100 in stock
RECALLED = 4      # inactive
USER = "user-1"


class BrokenNotificationService(MockNotificationService):
    async def send_order_confirmation(self, order):
        raise RuntimeError("Telegram is down")


class SlowNotificationService(MockNotificationService):
    async def send_order_confirmation(self, order):
        await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_place_order_prices_server_side(order_service, order_request, stock_of, count_rows):
    order = await order_service.place_order(
        USER, order_request((PARACETAMOL, 10), coupon_code="FLAT100")
    )

    assert order.status is OrderStatus.PENDING
    assert order.subtotal == Decimal("1000.00")
    assert order.discount_amount == Decimal("100.00")
    assert order.shipping_cost == Decimal("50.00")
    assert order.tax_rate == Decimal("12.00")
    assert order.tax_amount == Decimal("114.00")
    assert order.total == Decimal("1064.00")
    assert order.coupon_code == "FLAT100"
    assert order.items[0].unit_price == Decimal("100.00")

    assert await stock_of(PARACETAMOL) == 40
    assert await count_rows(OrderModel) == 1
    # Usage is counted at payment, not at placement
    assert await count_rows(CouponModel, CouponModel.code == "FLAT100", CouponModel.used_count == 0) == 1


@pytest.mark.asyncio
async def test_placed_event_written_with_execution_id(order_service, order_request, session_factory):
    order = await order_service.place_order(USER, order_request((VITAMIN_C, 1)))

    async with session_factory() as session:
        event = (await session.execute(
            OrderEventModel.__table__.select().where(OrderEventModel.aggregate_id == order.order_id)
        )).one()

    assert event.event_type == "OrderPlacedEvent"
    assert event.execution_id
    assert event.user_id == USER


@pytest.mark.asyncio
async def test_confirmation_sent_after_commit(order_service, order_request, notifications):
    order = await order_service.place_order(USER, order_request((VITAMIN_C, 2)))

    (sent,) = notifications.get_notifications("order_confirmation")
    assert sent["order_id"] == order.order_id
    assert notifications.get_notifications("low_stock") == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "country, state, rate, tax",
    [
        ("US", "CA", "7.25", "76.13"),   # state rate wins
        ("US", "NY", "6.00", "63.00"),   # falls back to country
        ("SG", None, "12", "126.00"),    # no row, default rate
        ("us", "ca", "7.25", "76.13"),   # codes are case-insensitive
        (" us ", " ", "6.00", "63.00"),  # blank state is no state
    ],
)
async def test_tax_rate_lookup(order_service, order_request, country, state, rate, tax):
    order = await order_service.place_order(
        USER, order_request((VITAMIN_C, 4), country=country, state=state)
    )

    assert order.tax_rate == Decimal(rate)
    assert order.tax_amount == Decimal(tax)
    assert order.total == Decimal("1050.00") + Decimal(tax)
    assert order.shipping_address.country == country.strip().upper()


@pytest.mark.asyncio
async def test_insufficient_stock_changes_nothing(
    order_service, order_request, stock_of, count_rows, notifications
):
    with pytest.raises(InsufficientStock) as exc_info:
        await order_service.place_order(USER, order_request((PARACETAMOL, 2), (AMOXICILLIN, 6)))

    assert exc_info.value.product_id == AMOXICILLIN
    assert exc_info.value.available == 5
    assert exc_info.value.requested == 6
    assert await stock_of(PARACETAMOL) == 50
    assert await stock_of(AMOXICILLIN) == 5
    assert await count_rows(OrderModel) == 0
    assert notifications.get_notifications() == []


@pytest.mark.asyncio
async def test_unknown_coupon_rolls_back(order_service, order_request, stock_of, count_rows):
    with pytest.raises(CouponNotFound):
        await order_service.place_order(USER, order_request((PARACETAMOL, 2), coupon_code="NOPE"))

    assert await stock_of(PARACETAMOL) == 50
    assert await count_rows(OrderModel) == 0
    assert await count_rows(OrderEventModel) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["EXPIRED5", "USEDUP", "PAUSED"])
async def test_unusable_coupons(order_service, order_request, code):
    with pytest.raises(CouponNotFound):
        await order_service.place_order(USER, order_request((VITAMIN_C, 8), coupon_code=code))


@pytest.mark.asyncio
async def test_coupon_minimum_checked_against_subtotal(order_service, order_request):
    # 500.00 subtotal against a 1000.00 minimum
    with pytest.raises(MinimumNotMet):
        await order_service.place_order(USER, order_request((PARACETAMOL, 5), coupon_code="WELCOME10"))


@pytest.mark.asyncio
async def test_coupon_code_is_case_insensitive(order_service, order_request):
    order = await order_service.place_order(
        USER, order_request((VITAMIN_C, 12), coupon_code=" welcome10 ")
    )

    assert order.coupon_code == "WELCOME10"
    assert order.discount_amount == Decimal("300.00")


@pytest.mark.asyncio
async def test_blank_coupon_is_ignored(order_service, order_request):
    order = await order_service.place_order(USER, order_request((VITAMIN_C, 1), coupon_code="  "))
    assert order.coupon_code is None
    assert order.discount_amount == Decimal("0.00")


@pytest.mark.asyncio
@pytest.mark.parametrize("product_id", [999, RECALLED])
async def test_unknown_or_inactive_product(order_service, order_request, product_id):
    with pytest.raises(ProductNotFound):
        await order_service.place_order(USER, order_request((product_id, 1)))


@pytest.mark.asyncio
@pytest.mark.parametrize("shipping_method_id", [99, 3])
async def test_invalid_shipping_method(order_service, order_request, stock_of, shipping_method_id):
    with pytest.raises(InvalidShippingMethod):
        await order_service.place_order(
            USER, order_request((PARACETAMOL, 1), shipping_method_id=shipping_method_id)
        )
    assert await stock_of(PARACETAMOL) == 50


@pytest.mark.asyncio
async def test_duplicate_lines_are_merged(order_service, order_request, stock_of):
    order = await order_service.place_order(USER, order_request((PARACETAMOL, 2), (PARACETAMOL, 3)))

    assert len(order.items) == 1
    assert order.items[0].quantity == 5
    assert await stock_of(PARACETAMOL) == 45


@pytest.mark.asyncio
async def test_low_stock_alert(order_service, order_request, notifications):
    await order_service.place_order(USER, order_request((AMOXICILLIN, 3)))

    (alert,) = notifications.get_notifications("low_stock")
    assert alert["product_id"] == AMOXICILLIN
    assert alert["remaining"] == 2


@pytest.mark.asyncio
async def test_concurrent_orders_never_oversell(order_service, order_request, stock_of, count_rows):
    results = await asyncio.gather(
        order_service.place_order("user-a", order_request((AMOXICILLIN, 3))),
        order_service.place_order("user-b", order_request((AMOXICILLIN, 3))),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStock)
    assert await stock_of(AMOXICILLIN) == 2
    assert await count_rows(OrderModel) == 1


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_order(
    session_factory, checkout_settings, order_request, count_rows
):
    service = OrderApplicationService(session_factory, BrokenNotificationService(), checkout_settings)

    order = await service.place_order(USER, order_request((VITAMIN_C, 1)))

    assert order.status is OrderStatus.PENDING
    assert await count_rows(OrderModel, OrderModel.id == order.order_id) == 1


@pytest.mark.asyncio
async def test_slow_notification_is_abandoned(session_factory, order_request):
    settings = CheckoutSettings(side_effect_timeout_seconds=0.05)
    service = OrderApplicationService(session_factory, SlowNotificationService(), settings)

    order = await asyncio.wait_for(service.place_order(USER, order_request((VITAMIN_C, 1))), timeout=2)
    assert order.status is OrderStatus.PENDING
