"""Application tests for payment creation and idempotent settlement."""
import asyncio
import json
import logging
import re
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import update

from core.application.dtos.payment_dto import CreatePaymentSourceRequest
from core.application.services import InvoiceApplicationService, PaymentApplicationService
from core.data.models import CouponModel, OrderEventModel, PaymentSourceModel
from core.domain.enums import OrderStatus, PaymentMethod, PaymentResult
from core.domain.exceptions import (
    AmountMismatch,
    OrderNotFound,
    OrderNotPayable,
    PaymentGatewayError,
    PaymentSourceNotFound,
)

PARACETAMOL = 1
USER = "user-1"


class BrokenDocumentStore:
    async def save(self, name, content):
        raise OSError("disk full")


@pytest_asyncio.fixture
async def order(order_service, order_request):
    # 10 x 100.00 - FLAT100 + 50.00 shipping + 12% = 1064.00
    return await order_service.place_order(USER, order_request((PARACETAMOL, 10), coupon_code="FLAT100"))


async def start_payment(payment_service, order, amount=None, method=PaymentMethod.GCASH):
    return await payment_service.initiate_payment(
        USER,
        CreatePaymentSourceRequest(order_id=order.order_id, amount=amount or order.total, method=method),
    )


class TestInitiatePayment:

    @pytest.mark.asyncio
    async def test_creates_source_and_awaits_payment(
        self, payment_service, order_service, gateway, order, count_rows
    ):
        source = await start_payment(payment_service, order)

        assert source.checkout_url.endswith(source.source_id)
        assert gateway.sources[source.source_id]["amount"].to_minor_units() == 106400
        assert gateway.sources[source.source_id]["reference"] == order.order_id
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.AWAITING_PAYMENT
        assert await count_rows(
            PaymentSourceModel,
            PaymentSourceModel.external_id == source.source_id,
            PaymentSourceModel.result == "pending",
        ) == 1

    @pytest.mark.asyncio
    async def test_amount_mismatch(self, payment_service, order_service, gateway, order):
        with pytest.raises(AmountMismatch) as exc_info:
            await start_payment(payment_service, order, amount=Decimal("1000.00"))

        assert exc_info.value.expected == Decimal("1064.00")
        assert gateway.sources == {}
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PENDING

    @pytest.mark.asyncio
    async def test_gateway_failure_leaves_order_pending(
        self, payment_service, order_service, gateway, order, count_rows
    ):
        gateway.fail_next()

        with pytest.raises(PaymentGatewayError):
            await start_payment(payment_service, order)

        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PENDING
        assert await count_rows(PaymentSourceModel) == 0

    @pytest.mark.asyncio
    async def test_cancelled_order_is_not_payable(self, payment_service, order_service, order):
        await order_service.cancel_order(order.order_id, USER)

        with pytest.raises(OrderNotPayable):
            await start_payment(payment_service, order)

    @pytest.mark.asyncio
    async def test_other_users_order(self, payment_service, order):
        with pytest.raises(OrderNotFound):
            await payment_service.initiate_payment(
                "intruder", CreatePaymentSourceRequest(order_id=order.order_id, amount=order.total)
            )

    @pytest.mark.asyncio
    async def test_pending_source_is_handed_back(self, payment_service, gateway, order, count_rows):
        first = await start_payment(payment_service, order)
        again = await start_payment(payment_service, order)

        assert again == first
        assert list(gateway.sources) == [first.source_id]
        assert await count_rows(PaymentSourceModel) == 1

    @pytest.mark.asyncio
    async def test_other_wallet_gets_its_own_source(self, payment_service, gateway, order):
        gcash = await start_payment(payment_service, order)
        grab_pay = await start_payment(payment_service, order, method=PaymentMethod.GRAB_PAY)

        assert grab_pay.source_id != gcash.source_id
        assert gateway.sources[grab_pay.source_id]["method"] == "grab_pay"


class TestVerify:

    @pytest.mark.asyncio
    async def test_pending_source_changes_nothing(self, payment_service, order_service, order):
        source = await start_payment(payment_service, order)

        status = await payment_service.verify_and_settle(source.source_id, USER)

        assert status.status is PaymentResult.PENDING
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.AWAITING_PAYMENT

    @pytest.mark.asyncio
    async def test_settlement_is_idempotent(
        self, payment_service, order_service, gateway, order, notifications, count_rows, tmp_path
    ):
        source = await start_payment(payment_service, order)
        gateway.set_status(source.source_id, PaymentResult.PAID)

        for _ in range(3):
            status = await payment_service.verify_and_settle(source.source_id, USER)
            assert status.status is PaymentResult.PAID

        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PAID
        # Later calls answer from the stored result
        assert gateway.status_checks == [source.source_id]
        assert await count_rows(
            OrderEventModel,
            OrderEventModel.aggregate_id == order.order_id,
            OrderEventModel.event_type == "OrderPaidEvent",
        ) == 1
        assert await count_rows(CouponModel, CouponModel.code == "FLAT100", CouponModel.used_count == 1) == 1

        (paid,) = notifications.get_notifications("payment_received")
        assert re.fullmatch(r"INV-\d{6}-000001", paid["invoice_number"])
        invoice = Path(tmp_path / "invoices" / f"invoice-{paid['invoice_number']}.txt")
        assert invoice.exists()
        assert "TOTAL PHP" in invoice.read_text()

    @pytest.mark.asyncio
    async def test_concurrent_verifications_settle_once(
        self, payment_service, order_service, gateway, order, notifications, count_rows
    ):
        source = await start_payment(payment_service, order)
        gateway.set_status(source.source_id, PaymentResult.PAID)

        results = await asyncio.gather(
            payment_service.verify_and_settle(source.source_id),
            payment_service.verify_and_settle(source.source_id),
            payment_service.verify_and_settle(source.source_id, USER),
        )

        assert all(r.status is PaymentResult.PAID for r in results)
        assert len(notifications.get_notifications("payment_received")) == 1
        assert await count_rows(CouponModel, CouponModel.code == "FLAT100", CouponModel.used_count == 1) == 1
        assert await count_rows(
            OrderEventModel,
            OrderEventModel.aggregate_id == order.order_id,
            OrderEventModel.event_type == "OrderPaidEvent",
        ) == 1

    @pytest.mark.asyncio
    async def test_failed_payment_can_be_retried(
        self, payment_service, order_service, gateway, order, count_rows
    ):
        first = await start_payment(payment_service, order)
        gateway.set_status(first.source_id, PaymentResult.FAILED)

        status = await payment_service.verify_and_settle(first.source_id, USER)

        assert status.status is PaymentResult.FAILED
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.AWAITING_PAYMENT
        assert await count_rows(PaymentSourceModel, PaymentSourceModel.result == "failed") == 1

        second = await start_payment(payment_service, order)
        gateway.set_status(second.source_id, PaymentResult.PAID)
        status = await payment_service.verify_and_settle(second.source_id, USER)

        assert status.status is PaymentResult.PAID
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PAID

    @pytest.mark.asyncio
    async def test_gateway_error_changes_nothing(self, payment_service, order_service, gateway, order):
        source = await start_payment(payment_service, order)
        gateway.set_status(source.source_id, PaymentResult.PAID)
        gateway.fail_next()

        with pytest.raises(PaymentGatewayError):
            await payment_service.verify_and_settle(source.source_id, USER)

        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.AWAITING_PAYMENT

    @pytest.mark.asyncio
    async def test_unknown_source(self, payment_service):
        with pytest.raises(PaymentSourceNotFound):
            await payment_service.verify_and_settle("src_missing", USER)

    @pytest.mark.asyncio
    async def test_other_users_source(self, payment_service, order):
        source = await start_payment(payment_service, order)

        with pytest.raises(PaymentSourceNotFound):
            await payment_service.verify_and_settle(source.source_id, "intruder")

    @pytest.mark.asyncio
    async def test_invoice_failure_is_swallowed(
        self, session_factory, gateway, notifications, invoice_settings, checkout_settings,
        order_service, order,
    ):
        invoices = InvoiceApplicationService(session_factory, BrokenDocumentStore(), invoice_settings)
        service = PaymentApplicationService(
            session_factory, gateway, notifications, invoices, checkout_settings
        )
        source = await start_payment(service, order)
        gateway.set_status(source.source_id, PaymentResult.PAID)

        status = await service.verify_and_settle(source.source_id, USER)

        assert status.status is PaymentResult.PAID
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PAID
        (paid,) = notifications.get_notifications("payment_received")
        assert paid["invoice_number"] is None

    @pytest.mark.asyncio
    async def test_second_capture_is_flagged_for_refund(
        self, payment_service, order_service, gateway, order, notifications, count_rows, caplog
    ):
        gcash = await start_payment(payment_service, order)
        grab_pay = await start_payment(payment_service, order, method=PaymentMethod.GRAB_PAY)
        gateway.set_status(gcash.source_id, PaymentResult.PAID)
        gateway.set_status(grab_pay.source_id, PaymentResult.PAID)

        await payment_service.verify_and_settle(gcash.source_id, USER)
        with caplog.at_level(logging.ERROR):
            status = await payment_service.verify_and_settle(grab_pay.source_id, USER)

        assert status.status is PaymentResult.PAID
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PAID
        assert await count_rows(
            OrderEventModel,
            OrderEventModel.aggregate_id == order.order_id,
            OrderEventModel.event_type == "OrderPaidEvent",
        ) == 1
        assert await count_rows(CouponModel, CouponModel.code == "FLAT100", CouponModel.used_count == 1) == 1
        assert len(notifications.get_notifications("payment_received")) == 1

        (alert,) = notifications.get_notifications("generic")
        assert alert["severity"] == 90
        assert grab_pay.source_id in alert["message"]
        assert f"already paid via {gcash.source_id}" in alert["message"]
        assert any("manual refund required" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_repeat_verification_of_settling_source_raises_no_alert(
        self, payment_service, gateway, order, notifications
    ):
        source = await start_payment(payment_service, order)
        gateway.set_status(source.source_id, PaymentResult.PAID)

        await payment_service.verify_and_settle(source.source_id, USER)
        await payment_service.verify_and_settle(source.source_id, USER)

        assert notifications.get_notifications("generic") == []

    @pytest.mark.asyncio
    async def test_coupon_limit_overrun_is_logged(
        self, session_factory, order_service, order_request, pay, count_rows, caplog
    ):
        async with session_factory() as session:
            await session.execute(
                update(CouponModel).where(CouponModel.code == "FLAT100").values(usage_limit=1)
            )
            await session.commit()
        # Both pass the limit check while neither is paid
        first = await order_service.place_order(USER, order_request((PARACETAMOL, 10), coupon_code="FLAT100"))
        second = await order_service.place_order(USER, order_request((PARACETAMOL, 10), coupon_code="FLAT100"))

        with caplog.at_level(logging.WARNING):
            await pay(first)
            assert "over its limit" not in caplog.text
            await pay(second)

        assert await count_rows(CouponModel, CouponModel.code == "FLAT100", CouponModel.used_count == 2) == 1
        assert "Coupon FLAT100 used 2 times, over its limit of 1" in caplog.text


class TestWebhook:

    @pytest.mark.asyncio
    async def test_webhook_settles(self, payment_service, order_service, gateway, order):
        source = await start_payment(payment_service, order)
        gateway.set_status(source.source_id, PaymentResult.PAID)

        payload = json.dumps({"type": "source.chargeable", "source_id": source.source_id}).encode()
        ack = await payment_service.handle_webhook(payload, signature=None)

        assert ack.received
        assert ack.detail["status"] == "paid"
        assert (await order_service.get_order(order.order_id, USER)).status is OrderStatus.PAID

    @pytest.mark.asyncio
    async def test_unknown_source_is_acknowledged(self, payment_service):
        payload = json.dumps({"type": "source.chargeable", "source_id": "src_elsewhere"}).encode()
        ack = await payment_service.handle_webhook(payload, signature=None)
        assert ack.detail["ignored"] is True

    @pytest.mark.asyncio
    async def test_event_without_source_is_acknowledged(self, payment_service):
        ack = await payment_service.handle_webhook(b'{"type": "checkout_session.paid"}', signature=None)
        assert ack.detail == {"event_type": "checkout_session.paid", "ignored": True}
