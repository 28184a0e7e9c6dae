"""SQLAlchemy repository implementations."""
from .coupon_repository_impl import SqlAlchemyCouponRepository
from .event_store_impl import SqlAlchemyOrderEventStore
from .order_repository_impl import SqlAlchemyOrderRepository
from .payment_repository_impl import SqlAlchemyPaymentSourceRepository
from .reference_repository_impl import SqlAlchemyCheckoutReferenceRepository
from .stock_ledger_impl import SqlAlchemyStockLedger

__all__ = [
    "SqlAlchemyCouponRepository",
    "SqlAlchemyOrderEventStore",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyPaymentSourceRepository",
    "SqlAlchemyCheckoutReferenceRepository",
    "SqlAlchemyStockLedger",
]
