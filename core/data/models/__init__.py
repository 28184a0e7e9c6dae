"""Database models."""

from .base import Base
from .catalog_model import ProductModel, ShippingMethodModel, TaxRateModel
from .coupon_model import CouponModel
from .event_model import OrderEventModel
from .order_model import OrderItemModel, OrderModel, RefundModel
from .payment_model import PaymentSourceModel

__all__ = [
    "Base",
    "CouponModel",
    "OrderEventModel",
    "OrderItemModel",
    "OrderModel",
    "PaymentSourceModel",
    "ProductModel",
    "RefundModel",
    "ShippingMethodModel",
    "TaxRateModel",
]
