"""Application service for Order operations."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.order_dto import (
    OrderDTO,
    OrderItemDTO,
    OrderLineRequest,
    OrderListDTO,
    PlaceOrderRequest,
    RefundDTO,
    RefundRequest,
    ShippingAddressDTO,
    UpdateOrderStatusRequest,
)
from core.application.interfaces import INotificationService
from core.application.services.coupon_service import evaluate_coupon
from core.application.services.side_effects import run_best_effort
from core.data.uow import UnitOfWork, create_uow
from core.domain.clock import utc_now
from core.domain.entities.order import Order, OrderItem, ShippingAddress
from core.domain.entities.product import Refund, StockLevel
from core.domain.enums import OrderStatus
from core.domain.exceptions import (
    InvalidShippingMethod,
    InvalidStatusTransition,
    NotEligibleForRefund,
    OrderNotCancellable,
    OrderNotFound,
)
from core.domain.services.pricing import PriceLine, compute_breakdown, compute_subtotal
from core.settings.modules.checkout_settings import CheckoutSettings

logger = logging.getLogger(__name__)

# Transitions an operator may trigger by hand; the rest belong to checkout and payment
OPERATOR_TARGETS = frozenset({
    OrderStatus.PROCESSING,
    OrderStatus.COMPLETED,
    OrderStatus.REFUNDED,
})


async def cancel_and_restock(uow: UnitOfWork, order: Order, reason: str) -> bool:
    """
    Cancel ``order`` and put its stock back, inside ``uow``.

    Stock is restored only after the conditional status write wins, so
    two concurrent cancellations cannot restore twice.

    Returns:
        False if the order's status changed underneath us
    """
    previous = order.cancel(reason)
    if not await uow.orders.update_status(order, previous):
        return False

    for item in order.items:
        await uow.stock.restore(item.product_id, item.quantity)

    uow.track(order)
    return True


class OrderApplicationService:
    """
    Application service for orchestrating order operations.

    Responsibilities:
    - Place orders atomically (stock check, pricing, stock decrement)
    - Cancel and refund within the status state machine
    - Fire confirmation and stock alerts after commit, best effort
    - Transform between DTOs and domain entities
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        notification_service: INotificationService,
        settings: CheckoutSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize order application service.

        Args:
            session_factory: SQLAlchemy async session factory
            notification_service: Customer and staff notifications
            settings: Currency, default tax rate, side-effect timeout
            clock: Source of "now" for coupon windows
        """
        self._session_factory = session_factory
        self._notifications = notification_service
        self._settings = settings
        self._clock = clock

    async def place_order(self, user_id: str, request: PlaceOrderRequest) -> OrderDTO:
        """Place an order, reserving stock in the same transaction.

        Args:
            user_id: Authenticated customer
            request: Validated order request

        Returns:
            OrderDTO of the pending order

        Raises:
            ProductNotFound, InsufficientStock, CouponNotFound, MinimumNotMet,
            InvalidShippingMethod: Nothing is persisted
        """
        lines = self._merge_lines(request.items)
        address = request.shipping_address

        uow = create_uow(self._session_factory)
        async with uow:
            execution_id = uow.execution_id

            # 1. Lock every product row and check availability
            levels: List[Tuple[StockLevel, int]] = []
            for product_id, quantity in lines:
                level = await uow.stock.check_and_lock(product_id, quantity)
                levels.append((level, quantity))

            # 2. Price from the catalog
            subtotal = compute_subtotal(
                PriceLine(unit_price=level.price, quantity=quantity) for level, quantity in levels
            )

            # 3. Coupon against the subtotal
            discount = Decimal("0.00")
            coupon_code: Optional[str] = None
            if request.coupon_code:
                validation = await evaluate_coupon(
                    uow.coupons, request.coupon_code, subtotal, self._clock()
                )
                discount = validation.discount_amount
                coupon_code = validation.coupon_code

            # 4. Shipping and tax
            shipping = await uow.reference.get_shipping_method(request.shipping_method_id)
            if shipping is None:
                raise InvalidShippingMethod(request.shipping_method_id)

            tax_rate = await uow.reference.find_tax_rate(address.country, address.state)
            if tax_rate is None:
                tax_rate = self._settings.default_tax_rate

            breakdown = compute_breakdown(subtotal, discount, shipping.base_cost, tax_rate)

            # 5. Persist order, then take the stock
            order = Order.place(
                user_id=user_id,
                items=[
                    OrderItem(
                        product_id=level.product_id,
                        product_name=level.name,
                        unit=level.unit,
                        quantity=quantity,
                        unit_price=level.price,
                    )
                    for level, quantity in levels
                ],
                shipping_address=ShippingAddress(
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    country=address.country,
                    postal_code=address.postal_code,
                ),
                shipping_method_id=shipping.id,
                payment_method=request.payment_method.value,
                breakdown=breakdown,
                coupon_code=coupon_code,
                currency=self._settings.currency,
            )
            await uow.orders.add(order)

            for product_id, quantity in lines:
                await uow.stock.decrement(product_id, quantity)

            # 6. Atomic commit
            uow.track(order)
            await uow.commit()

        logger.info(
            f"[{execution_id}] ✅ Order {order.id} placed by {user_id}: "
            f"{len(order.items)} item(s), total {order.total} {order.currency}"
        )

        # 7. Side effects, after commit only
        timeout = self._settings.side_effect_timeout_seconds
        await run_best_effort(
            f"Order confirmation for {order.id}",
            self._notifications.send_order_confirmation(order),
            timeout,
        )
        for level, quantity in levels:
            if level.is_low_after(quantity):
                await run_best_effort(
                    f"Low stock alert for product {level.product_id}",
                    self._notifications.send_low_stock_alert(
                        level.product_id, level.name, level.available - quantity
                    ),
                    timeout,
                )

        return self._order_to_dto(order)

    async def cancel_order(self, order_id: str, user_id: str) -> OrderDTO:
        """Cancel a pending order and restore its stock.

        Raises:
            OrderNotFound: Unknown order or not the caller's
            OrderNotCancellable: Order is no longer pending
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await self._get_owned(uow, order_id, user_id, for_update=True)

            if order.status is not OrderStatus.PENDING:
                raise OrderNotCancellable(order.id, order.status.value)

            if not await cancel_and_restock(uow, order, reason="cancelled by customer"):
                raise OrderNotCancellable(order.id, "modified concurrently")

            await uow.commit()
            execution_id = uow.execution_id

        logger.info(f"[{execution_id}] Order {order.id} cancelled, stock restored")

        await run_best_effort(
            f"Cancellation notice for {order.id}",
            self._notifications.send_order_cancelled(order, reason="cancelled by customer"),
            self._settings.side_effect_timeout_seconds,
        )
        return self._order_to_dto(order)

    async def request_refund(self, order_id: str, user_id: str, request: RefundRequest) -> RefundDTO:
        """Open a refund request on a completed order. Stock is not restored.

        Raises:
            OrderNotFound: Unknown order or not the caller's
            NotEligibleForRefund: Order is not completed
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await self._get_owned(uow, order_id, user_id, for_update=True)

            order.request_refund(request.reason)
            if not await uow.orders.update_status(order, OrderStatus.COMPLETED):
                raise NotEligibleForRefund(order.id, "modified concurrently")

            refund = await uow.orders.add_refund(
                Refund(
                    order_id=order.id,
                    user_id=user_id,
                    reason=request.reason,
                    details=request.details,
                    amount=order.total,
                )
            )
            uow.track(order)
            await uow.commit()

        logger.info(f"Refund {refund.id} requested for order {order.id} ({request.reason})")
        return RefundDTO(
            refund_id=refund.id,
            order_id=refund.order_id,
            reason=refund.reason,
            amount=refund.amount,
            status=refund.status,
        )

    async def advance_status(self, order_id: str, request: UpdateOrderStatusRequest) -> OrderDTO:
        """Operator fulfilment transitions (processing, completed, refunded).

        Raises:
            OrderNotFound: Unknown order
            InvalidStatusTransition: Target not reachable from the current status
        """
        uow = create_uow(self._session_factory)
        async with uow:
            order = await uow.orders.get(order_id, for_update=True)
            if order is None:
                raise OrderNotFound(order_id)

            if request.status not in OPERATOR_TARGETS:
                raise InvalidStatusTransition(order.id, order.status.value, request.status.value)

            previous = order.transition_to(request.status, reason=request.reason)
            if not await uow.orders.update_status(order, previous):
                raise InvalidStatusTransition(order.id, previous.value, request.status.value)

            uow.track(order)
            await uow.commit()

        logger.info(f"Order {order.id}: {previous.value} -> {order.status.value}")
        return self._order_to_dto(order)

    async def get_order(self, order_id: str, user_id: str) -> OrderDTO:
        uow = create_uow(self._session_factory)
        async with uow:
            order = await self._get_owned(uow, order_id, user_id)
            return self._order_to_dto(order)

    async def get_history(self, order_id: str) -> List[Dict[str, Any]]:
        """Audit trail of an order, oldest event first.

        Raises:
            OrderNotFound: Unknown order
        """
        uow = create_uow(self._session_factory)
        async with uow:
            if await uow.orders.get(order_id) is None:
                raise OrderNotFound(order_id)
            return await uow.events.list_for_order(order_id)

    async def list_orders(self, user_id: str, limit: int = 20, offset: int = 0) -> OrderListDTO:
        uow = create_uow(self._session_factory)
        async with uow:
            orders = await uow.orders.list_for_user(user_id, limit=limit, offset=offset)
            return OrderListDTO(
                orders=[self._order_to_dto(order) for order in orders],
                total=len(orders),
            )

    @staticmethod
    async def _get_owned(
        uow: UnitOfWork, order_id: str, user_id: str, for_update: bool = False
    ) -> Order:
        # Someone else's order looks exactly like a missing one
        order = await uow.orders.get(order_id, for_update=for_update)
        if order is None or order.user_id != user_id:
            raise OrderNotFound(order_id)
        return order

    @staticmethod
    def _merge_lines(items: Iterable[OrderLineRequest]) -> List[Tuple[int, int]]:
        """Sum quantities per product, ordered by product id.

        A fixed lock order keeps two multi-item orders from deadlocking
        on each other's product rows.
        """
        merged: Dict[int, int] = {}
        for item in items:
            merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
        return sorted(merged.items())

    @staticmethod
    def _order_to_dto(order: Order) -> OrderDTO:
        """Transform Order domain entity to OrderDTO."""
        address = order.shipping_address
        return OrderDTO(
            order_id=order.id,
            user_id=order.user_id,
            status=order.status,
            items=[
                OrderItemDTO(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    unit=item.unit,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ],
            shipping_address=ShippingAddressDTO(
                street=address.street,
                city=address.city,
                state=address.state,
                country=address.country,
                postal_code=address.postal_code,
            ),
            shipping_method_id=order.shipping_method_id,
            payment_method=order.payment_method,
            coupon_code=order.coupon_code,
            subtotal=order.subtotal,
            discount_amount=order.discount_amount,
            shipping_cost=order.shipping_cost,
            tax_rate=order.tax_rate,
            tax_amount=order.tax_amount,
            total=order.total,
            currency=order.currency,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
