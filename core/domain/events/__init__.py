"""Domain events recorded on the order audit trail."""
from .base import DomainEvent
from .order_events import (
    OrderEvent,
    OrderPlacedEvent,
    OrderStatusChangedEvent,
    OrderCancelledEvent,
    OrderPaidEvent,
    OrderRefundRequestedEvent,
)

__all__ = [
    "DomainEvent",
    "OrderEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
    "OrderCancelledEvent",
    "OrderPaidEvent",
    "OrderRefundRequestedEvent",
]
