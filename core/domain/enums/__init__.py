"""Domain enums."""

from .order_status import OrderStatus, ORDER_TRANSITIONS
from .payment_status import PaymentResult, PaymentMethod, DiscountType

__all__ = [
    "OrderStatus",
    "ORDER_TRANSITIONS",
    "PaymentResult",
    "PaymentMethod",
    "DiscountType",
]
