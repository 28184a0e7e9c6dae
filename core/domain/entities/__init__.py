"""Domain entities."""
from .coupon import Coupon, CouponValidation, normalize_code
from .order import Order, OrderItem, ShippingAddress
from .payment import PaymentSource
from .product import Refund, ShippingMethod, StockLevel

__all__ = [
    "Coupon",
    "CouponValidation",
    "normalize_code",
    "Order",
    "OrderItem",
    "ShippingAddress",
    "PaymentSource",
    "Refund",
    "ShippingMethod",
    "StockLevel",
]
