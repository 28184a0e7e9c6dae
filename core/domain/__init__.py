"""Domain layer - pure domain models and interfaces."""

from .entities import Coupon, Order, OrderItem, PaymentSource, ShippingAddress
from .enums import OrderStatus, PaymentResult
from .value_objects import ExecutionID, Money, OrderId

__all__ = [
    "Coupon",
    "ExecutionID",
    "Money",
    "Order",
    "OrderId",
    "OrderItem",
    "OrderStatus",
    "PaymentResult",
    "PaymentSource",
    "ShippingAddress",
]
