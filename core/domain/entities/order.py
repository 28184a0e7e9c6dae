"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..clock import utc_now
from ..enums import OrderStatus, ORDER_TRANSITIONS
from ..events.base import DomainEvent
from ..events.order_events import (
    OrderCancelledEvent,
    OrderPaidEvent,
    OrderPlacedEvent,
    OrderRefundRequestedEvent,
    OrderStatusChangedEvent,
)
from ..exceptions import InvalidStatusTransition, NotEligibleForRefund
from ..services.pricing import PriceBreakdown
from ..value_objects import OrderId


@dataclass
class OrderItem:
    """Order line with the catalog price captured at order time."""
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    unit: Optional[str] = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError(f"Quantity must be positive, got {self.quantity}")
        if self.unit_price < 0:
            raise ValueError(f"Unit price cannot be negative: {self.unit_price}")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    country: str
    state: Optional[str] = None
    postal_code: Optional[str] = None


@dataclass
class Order:
    """
    Order aggregate root.

    Holds the priced lines, the money breakdown and the status. Status
    changes go through ``transition_to`` so that only the moves in
    ORDER_TRANSITIONS are possible, and each one is recorded as a
    domain event for the audit trail.
    """
    order_id: OrderId
    user_id: str
    items: List[OrderItem]
    shipping_address: ShippingAddress
    shipping_method_id: int
    payment_method: str
    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    currency: str = "PHP"
    coupon_code: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def place(
        cls,
        user_id: str,
        items: List[OrderItem],
        shipping_address: ShippingAddress,
        shipping_method_id: int,
        payment_method: str,
        breakdown: PriceBreakdown,
        coupon_code: Optional[str] = None,
        currency: str = "PHP",
    ) -> "Order":
        """Create a new pending order and record OrderPlacedEvent."""
        if not items:
            raise ValueError("Order must contain at least one item")

        order = cls(
            order_id=OrderId.generate(),
            user_id=user_id,
            items=list(items),
            shipping_address=shipping_address,
            shipping_method_id=shipping_method_id,
            payment_method=payment_method,
            subtotal=breakdown.subtotal,
            discount_amount=breakdown.discount_amount,
            shipping_cost=breakdown.shipping_cost,
            tax_rate=breakdown.tax_rate,
            tax_amount=breakdown.tax_amount,
            total=breakdown.total,
            currency=currency,
            coupon_code=coupon_code,
        )
        order._record_event(
            OrderPlacedEvent(
                order_id=str(order.order_id),
                user_id=user_id,
                total=order.total,
                item_count=len(order.items),
                coupon_code=coupon_code,
            )
        )
        return order

    @property
    def id(self) -> str:
        return str(self.order_id)

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ORDER_TRANSITIONS[self.status]

    def transition_to(self, target: OrderStatus, reason: Optional[str] = None) -> OrderStatus:
        """
        Move to ``target`` if the state machine allows it.

        Returns:
            The previous status

        Raises:
            InvalidStatusTransition: If the move is not allowed
        """
        if not self.can_transition_to(target):
            raise InvalidStatusTransition(self.id, self.status.value, target.value)

        previous = self.status
        self.status = target
        self.updated_at = utc_now()
        self._record_event(
            OrderStatusChangedEvent(
                order_id=self.id,
                user_id=self.user_id,
                previous_status=previous.value,
                new_status=target.value,
                reason=reason,
            )
        )
        return previous

    def mark_awaiting_payment(self) -> None:
        if self.status is not OrderStatus.AWAITING_PAYMENT:
            self.transition_to(OrderStatus.AWAITING_PAYMENT, reason="payment source created")

    def mark_paid(self, source_id: str) -> None:
        self.transition_to(OrderStatus.PAID, reason="payment settled")
        self._record_event(
            OrderPaidEvent(
                order_id=self.id,
                user_id=self.user_id,
                source_id=source_id,
                amount=self.total,
            )
        )

    def cancel(self, reason: str) -> OrderStatus:
        """Cancel the order. Stock restoration is the caller's job."""
        previous = self.transition_to(OrderStatus.CANCELLED, reason=reason)
        self._record_event(
            OrderCancelledEvent(
                order_id=self.id,
                user_id=self.user_id,
                previous_status=previous.value,
                reason=reason,
            )
        )
        return previous

    def request_refund(self, reason: str) -> None:
        if self.status is not OrderStatus.COMPLETED:
            raise NotEligibleForRefund(self.id, self.status.value)
        self.transition_to(OrderStatus.REFUND_REQUESTED, reason=reason)
        self._record_event(
            OrderRefundRequestedEvent(
                order_id=self.id,
                user_id=self.user_id,
                reason=reason,
                amount=self.total,
            )
        )

    # Event management

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)

    def get_events(self) -> List[DomainEvent]:
        return self._domain_events.copy()

    def clear_events(self) -> None:
        self._domain_events.clear()
