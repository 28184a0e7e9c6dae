"""Sweep of orders abandoned before payment."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.interfaces import INotificationService
from core.application.services.order_service import cancel_and_restock
from core.application.services.payment_service import PaymentApplicationService
from core.application.services.side_effects import run_best_effort
from core.data.uow import create_uow
from core.domain.clock import utc_now
from core.domain.enums import OrderStatus, PaymentResult
from core.domain.exceptions import PaymentGatewayError
from core.settings.modules.checkout_settings import CheckoutSettings

logger = logging.getLogger(__name__)

UNPAID_STATUSES = (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT)


@dataclass
class SweepReport:
    settled: List[str] = field(default_factory=list)
    cancelled: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class ReconciliationService:
    """
    Releases stock held by orders nobody paid for.

    Orders still pending or awaiting payment after
    ``payment_timeout_minutes`` are checked against the gateway first;
    a source that turns out to be paid settles the order. Everything else
    is cancelled with its stock restored, one transaction per order.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        payment_service: PaymentApplicationService,
        notification_service: INotificationService,
        settings: CheckoutSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._payments = payment_service
        self._notifications = notification_service
        self._settings = settings
        self._clock = clock

    async def sweep_abandoned(self) -> SweepReport:
        report = SweepReport()
        cutoff = self._clock() - timedelta(minutes=self._settings.payment_timeout_minutes)

        uow = create_uow(self._session_factory)
        async with uow:
            stale_ids = await uow.orders.list_stale(UNPAID_STATUSES, cutoff)

        if not stale_ids:
            return report

        logger.info(f"🧹 {len(stale_ids)} unpaid order(s) older than {cutoff:%Y-%m-%d %H:%M}")

        for order_id in stale_ids:
            try:
                paid = await self._settle_if_paid(order_id)
            except PaymentGatewayError as e:
                # Never cancel an order whose payment state is unknown
                logger.warning(f"Skipping order {order_id}: gateway unavailable ({e})")
                report.skipped.append(order_id)
                continue

            if paid:
                report.settled.append(order_id)
            elif await self._expire(order_id):
                report.cancelled.append(order_id)
            else:
                report.skipped.append(order_id)

        summary = (
            f"Sweep done: {len(report.settled)} settled, "
            f"{len(report.cancelled)} cancelled, {len(report.skipped)} skipped"
        )
        logger.info(summary)
        await run_best_effort(
            "Sweep summary",
            self._notifications.notify(f"🧹 {summary}", severity=80 if report.skipped else 30),
            self._settings.side_effect_timeout_seconds,
        )
        return report

    async def run_forever(self, interval_seconds: float) -> None:
        """Background loop started by the API process when sweeping is enabled."""
        logger.info(f"Reconciliation loop started (every {interval_seconds}s)")
        while True:
            try:
                await self.sweep_abandoned()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"❌ Reconciliation sweep failed: {e}", exc_info=True)
            await asyncio.sleep(interval_seconds)

    async def _settle_if_paid(self, order_id: str) -> bool:
        uow = create_uow(self._session_factory)
        async with uow:
            sources = await uow.payments.list_pending_for_order(order_id)

        for source in sources:
            result = await self._payments.verify_and_settle(source.external_id)
            if result.status is PaymentResult.PAID:
                return True
        return False

    async def _expire(self, order_id: str) -> bool:
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.get(order_id, for_update=True)
            if order is None or order.status not in UNPAID_STATUSES:
                return False

            if not await cancel_and_restock(uow, order, reason="payment timeout"):
                return False

            for source in await uow.payments.list_pending_for_order(order_id):
                await uow.payments.record_result(source.external_id, PaymentResult.EXPIRED)

            await uow.commit()
            execution_id = uow.execution_id

        logger.info(f"[{execution_id}] Order {order_id} expired, stock restored")
        await run_best_effort(
            f"Expiry notice for {order_id}",
            self._notifications.send_order_cancelled(order, reason="payment timeout"),
            self._settings.side_effect_timeout_seconds,
        )
        return True
