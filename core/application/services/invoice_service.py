"""Invoice rendering and storage for paid orders."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.interfaces import IDocumentStore
from core.data.uow import create_uow
from core.domain.entities.order import Order
from core.domain.entities.payment import PaymentSource
from core.domain.enums import OrderStatus
from core.domain.exceptions import OrderNotFound
from core.settings.modules.invoice_settings import InvoiceSettings

logger = logging.getLogger(__name__)

INVOICE_STATUSES = frozenset({
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
    OrderStatus.COMPLETED,
})


@dataclass(frozen=True)
class Invoice:
    number: str
    order_id: str
    location: str


def invoice_number(source: PaymentSource) -> str:
    """``INV-YYYYMM-NNNNNN`` from the settling payment's month and id."""
    return f"INV-{source.updated_at:%Y%m}-{source.id:06d}"


class InvoiceApplicationService:
    """
    Renders an invoice for a paid order and hands it to the document store.

    Callers run ``emit`` best effort after the payment transaction has
    committed; a failure here never affects the order.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        document_store: IDocumentStore,
        settings: InvoiceSettings,
    ) -> None:
        self._session_factory = session_factory
        self._store = document_store
        self._settings = settings

    async def emit(self, order_id: str) -> Invoice:
        """Render and store the invoice of a paid order.

        Raises:
            OrderNotFound: Unknown order
            ValueError: Order has not been paid
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.get(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            source = await uow.payments.find_paid_for_order(order_id)

        if order.status not in INVOICE_STATUSES or source is None:
            raise ValueError(f"Order {order_id} is {order.status.value}, not invoiceable")

        number = invoice_number(source)
        content = self.render(order, number, issued_at=source.updated_at)
        location = await self._store.save(f"invoice-{number}.txt", content.encode("utf-8"))

        logger.info(f"🧾 Invoice {number} stored at {location}")
        return Invoice(number=number, order_id=order.id, location=location)

    def render(self, order: Order, number: str, issued_at: datetime) -> str:
        address = order.shipping_address
        ship_to = ", ".join(
            part for part in (
                address.street, address.city, address.state,
                address.country, address.postal_code,
            ) if part
        )

        lines: List[str] = [
            self._settings.company_name,
            f"INVOICE {number}",
            f"Date: {issued_at:%Y-%m-%d}",
            f"Order: {order.id}",
            f"Customer: {order.user_id}",
            f"Ship to: {ship_to}",
            "",
            f"{'Item':<40}{'Qty':>5}{'Unit price':>14}{'Amount':>14}",
            "-" * 73,
        ]
        for item in order.items:
            name = item.product_name if not item.unit else f"{item.product_name} ({item.unit})"
            lines.append(
                f"{name[:40]:<40}{item.quantity:>5}{item.unit_price:>14.2f}{item.line_total:>14.2f}"
            )
        lines.append("-" * 73)

        lines.append(self._money_row("Subtotal", order.subtotal))
        if order.discount_amount:
            lines.append(self._money_row(f"Discount ({order.coupon_code})", -order.discount_amount))
        lines.append(self._money_row("Shipping", order.shipping_cost))
        lines.append(self._money_row(f"Tax ({order.tax_rate:.2f}%)", order.tax_amount))
        lines.append(self._money_row(f"TOTAL {order.currency}", order.total))
        lines.append("")
        lines.append(f"Thank you for shopping with {self._settings.company_name}.")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _money_row(label: str, amount) -> str:
        return f"{label:<59}{amount:>14.2f}"
