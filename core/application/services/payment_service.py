"""Application service for payment creation and settlement."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.payment_dto import (
    CreatePaymentSourceRequest,
    PaymentSourceDTO,
    PaymentStatusDTO,
    WebhookAckDTO,
)
from core.application.interfaces import INotificationService, IPaymentGateway
from core.application.services.invoice_service import InvoiceApplicationService
from core.application.services.side_effects import run_best_effort
from core.data.uow import UnitOfWork, create_uow
from core.domain.entities.order import Order
from core.domain.entities.payment import PaymentSource
from core.domain.enums import OrderStatus, PaymentResult
from core.domain.exceptions import (
    AmountMismatch,
    OrderNotFound,
    OrderNotPayable,
    PaymentSourceNotFound,
)
from core.domain.value_objects import Money, round_money
from core.settings.modules.checkout_settings import CheckoutSettings

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT})


class PaymentApplicationService:
    """
    Coordinates the payment gateway with order state.

    Gateway calls always happen between transactions, never inside one.
    Settlement is idempotent: the ``awaiting_payment -> paid`` write is
    conditional, and only the call that wins it emits the invoice and
    the payment notification.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        gateway: IPaymentGateway,
        notification_service: INotificationService,
        invoice_service: InvoiceApplicationService,
        settings: CheckoutSettings,
    ) -> None:
        self._session_factory = session_factory
        self._gateway = gateway
        self._notifications = notification_service
        self._invoices = invoice_service
        self._settings = settings

    async def initiate_payment(self, user_id: str, request: CreatePaymentSourceRequest) -> PaymentSourceDTO:
        """Create a gateway source for an order and move it to awaiting_payment.

        Args:
            user_id: Authenticated customer
            request: Order id, amount and e-wallet method

        Returns:
            PaymentSourceDTO with the gateway checkout URL

        Raises:
            OrderNotFound: Unknown order or not the caller's
            OrderNotPayable: Order is past the payment stage
            AmountMismatch: Amount differs from the order total
            PaymentGatewayError: Gateway failure, order left untouched
        """
        # 1. Read and check the order
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.get(request.order_id)
            if order is None or order.user_id != user_id:
                raise OrderNotFound(request.order_id)
            pending = await uow.payments.list_pending_for_order(order.id)

        if order.status not in PAYABLE_STATUSES:
            raise OrderNotPayable(order.id, order.status.value)

        if round_money(request.amount) != order.total:
            raise AmountMismatch(order.id, order.total, request.amount)

        # An open checkout for the same wallet is handed back instead of
        # opening a second one the customer could also pay
        for existing in pending:
            if (
                existing.method == request.method.value
                and existing.amount == order.total
                and existing.checkout_url
            ):
                logger.info(f"Reusing pending source {existing.external_id} for order {order.id}")
                return PaymentSourceDTO(
                    checkout_url=existing.checkout_url, source_id=existing.external_id
                )

        # 2. Gateway call, outside any transaction
        source = await self._gateway.create_source(
            Money(amount=order.total, currency=order.currency),
            request.method.value,
            reference=order.id,
        )

        # 3. Record the source and advance the order
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.get(order.id, for_update=True)

            if order.status is OrderStatus.PENDING:
                order.mark_awaiting_payment()
                if not await uow.orders.update_status(order, OrderStatus.PENDING):
                    raise OrderNotPayable(order.id, "modified concurrently")
            elif order.status is not OrderStatus.AWAITING_PAYMENT:
                logger.warning(
                    f"Gateway source {source.source_id} orphaned: order {order.id} "
                    f"became {order.status.value} meanwhile"
                )
                raise OrderNotPayable(order.id, order.status.value)

            await uow.payments.add(
                PaymentSource(
                    order_id=order.id,
                    external_id=source.source_id,
                    amount=order.total,
                    method=request.method.value,
                    checkout_url=source.checkout_url,
                )
            )
            uow.track(order)
            await uow.commit()
            execution_id = uow.execution_id

        logger.info(
            f"[{execution_id}] 💳 Payment source {source.source_id} created for order "
            f"{order.id} ({order.total} {order.currency})"
        )
        return PaymentSourceDTO(checkout_url=source.checkout_url, source_id=source.source_id)

    async def verify_and_settle(self, source_id: str, user_id: Optional[str] = None) -> PaymentStatusDTO:
        """Ask the gateway about a source and settle the order if it is paid.

        Safe to call any number of times, concurrently, from the customer
        redirect, the webhook and the reconciliation sweep.

        Args:
            source_id: Gateway source id
            user_id: Caller to check ownership against, None for system callers

        Raises:
            PaymentSourceNotFound: Unknown source or not the caller's
            PaymentGatewayError: Gateway failure, nothing changed
        """
        uow = create_uow(self._session_factory)
        async with uow:
            source = await uow.payments.get_by_external_id(source_id)
            if source is None:
                raise PaymentSourceNotFound(source_id)
            if user_id is not None:
                order = await uow.orders.get(source.order_id)
                if order is None or order.user_id != user_id:
                    raise PaymentSourceNotFound(source_id)

        if source.result.is_terminal:
            return self._status_dto(source, source.result)

        status = await self._gateway.get_source_status(source_id)

        if status is PaymentResult.PAID:
            settled = await self._settle(source)
            if settled is not None:
                await self._after_settlement(settled)
        elif status.is_terminal:
            await self._record_failure(source, status)

        return self._status_dto(source, status)

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookAckDTO:
        """Gateway webhook entry point.

        Raises:
            InvalidWebhookSignature: Signature missing or wrong
        """
        event = self._gateway.parse_webhook_event(payload, signature)
        if event.source_id is None:
            logger.info(f"Webhook {event.event_type} ignored (no source)")
            return WebhookAckDTO(detail={"event_type": event.event_type, "ignored": True})

        try:
            result = await self.verify_and_settle(event.source_id)
        except PaymentSourceNotFound:
            logger.warning(f"Webhook {event.event_type} for unknown source {event.source_id}")
            return WebhookAckDTO(detail={"event_type": event.event_type, "ignored": True})

        return WebhookAckDTO(
            detail={"event_type": event.event_type, "status": result.status.value}
        )

    async def _settle(self, source: PaymentSource) -> Optional[Order]:
        """Mark source and order paid in one transaction.

        Returns:
            The order if this call performed the transition, None if it was
            already settled (or cannot be)
        """
        problem: Optional[str] = None
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.get(source.order_id, for_update=True)
            settled_by = await uow.payments.find_paid_for_order(order.id)
            newly_paid = await uow.payments.record_result(source.external_id, PaymentResult.PAID)

            if order.status is not OrderStatus.AWAITING_PAYMENT:
                captured_twice = settled_by is not None and settled_by.external_id != source.external_id
                if newly_paid and captured_twice:
                    problem = f"was already paid via {settled_by.external_id}"
                elif newly_paid and order.status is OrderStatus.CANCELLED:
                    problem = "is cancelled"
                await uow.commit()
                settled = False
            else:
                order.mark_paid(source.external_id)
                settled = await uow.orders.update_status(order, OrderStatus.AWAITING_PAYMENT)
                if settled:
                    if order.coupon_code:
                        await self._count_coupon_use(uow, order)
                    uow.track(order)
                    await uow.commit()
            execution_id = uow.execution_id

        if problem:
            await self._report_stray_payment(source, order, problem)
        if not settled:
            return None

        logger.info(f"[{execution_id}] ✅ Order {order.id} paid via {source.external_id}")
        return order

    @staticmethod
    async def _count_coupon_use(uow: UnitOfWork, order: Order) -> None:
        # Limits are checked at checkout, so orders placed before the last
        # slot was taken can still settle past it
        coupon = await uow.coupons.increment_usage(order.coupon_code)
        if coupon and coupon.usage_limit is not None and coupon.used_count > coupon.usage_limit:
            logger.warning(
                f"Coupon {coupon.code} used {coupon.used_count} times, over its limit of "
                f"{coupon.usage_limit} (order {order.id})"
            )

    async def _report_stray_payment(self, source: PaymentSource, order: Order, problem: str) -> None:
        """A captured payment that did not settle anything needs a manual refund."""
        message = (
            f"Source {source.external_id} captured {source.amount} {order.currency} "
            f"but order {order.id} {problem}; manual refund required"
        )
        logger.error(f"❌ {message}")
        await run_best_effort(
            f"Stray payment alert for {source.external_id}",
            self._notifications.notify(f"❌ {message}", severity=90),
            self._settings.side_effect_timeout_seconds,
        )

    async def _record_failure(self, source: PaymentSource, status: PaymentResult) -> None:
        # The order stays awaiting_payment so the customer can retry
        uow = create_uow(self._session_factory)
        async with uow:
            changed = await uow.payments.record_result(source.external_id, status)
            await uow.commit()

        if changed:
            logger.warning(
                f"Payment source {source.external_id} for order {source.order_id} {status.value}"
            )

    async def _after_settlement(self, order: Order) -> None:
        timeout = self._settings.side_effect_timeout_seconds
        invoice = await run_best_effort(
            f"Invoice for order {order.id}", self._invoices.emit(order.id), timeout
        )
        await run_best_effort(
            f"Payment notification for order {order.id}",
            self._notifications.send_payment_received(
                order, invoice.number if invoice else None
            ),
            timeout,
        )

    @staticmethod
    def _status_dto(source: PaymentSource, status: PaymentResult) -> PaymentStatusDTO:
        return PaymentStatusDTO(source_id=source.external_id, order_id=source.order_id, status=status)
