"""Repository interfaces."""
from .coupon_repository import CouponRepository
from .event_store import OrderEventStore
from .order_repository import OrderRepository
from .payment_repository import PaymentSourceRepository
from .reference_repository import CheckoutReferenceRepository
from .stock_ledger import StockLedger

__all__ = [
    "CouponRepository",
    "OrderEventStore",
    "OrderRepository",
    "PaymentSourceRepository",
    "CheckoutReferenceRepository",
    "StockLedger",
]
