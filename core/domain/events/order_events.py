"""
Order Domain Events.

Recorded by the Order aggregate and persisted to the ``order_events``
audit table when the surrounding unit of work commits.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .base import DomainEvent


@dataclass
class OrderEvent(DomainEvent):
    """Event whose aggregate is an order."""

    order_id: str = ""

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class OrderPlacedEvent(OrderEvent):
    """Order accepted with stock reserved."""

    total: Decimal = Decimal("0.00")
    item_count: int = 0
    coupon_code: Optional[str] = None


@dataclass
class OrderStatusChangedEvent(OrderEvent):
    """Order moved along the status state machine."""

    previous_status: str = ""
    new_status: str = ""
    reason: Optional[str] = None


@dataclass
class OrderCancelledEvent(OrderEvent):
    """Order cancelled and its stock returned."""

    previous_status: str = ""
    reason: Optional[str] = None


@dataclass
class OrderPaidEvent(OrderEvent):
    """Payment for the order settled."""

    source_id: str = ""
    amount: Decimal = Decimal("0.00")


@dataclass
class OrderRefundRequestedEvent(OrderEvent):
    """Customer asked for a refund of a completed order."""

    reason: str = ""
    amount: Decimal = Decimal("0.00")
