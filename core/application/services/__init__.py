"""Application services."""
from .coupon_service import CouponApplicationService, evaluate_coupon
from .invoice_service import Invoice, InvoiceApplicationService
from .order_service import OrderApplicationService, cancel_and_restock
from .payment_service import PaymentApplicationService
from .reconciliation_service import ReconciliationService, SweepReport

__all__ = [
    "CouponApplicationService",
    "evaluate_coupon",
    "Invoice",
    "InvoiceApplicationService",
    "OrderApplicationService",
    "cancel_and_restock",
    "PaymentApplicationService",
    "ReconciliationService",
    "SweepReport",
]
