"""Application layer - services, interfaces, and DTOs."""

from .interfaces import IDocumentStore, INotificationService, IPaymentGateway
from .services import (
    CouponApplicationService,
    InvoiceApplicationService,
    OrderApplicationService,
    PaymentApplicationService,
    ReconciliationService,
)

__all__ = [
    # Services
    "CouponApplicationService",
    "InvoiceApplicationService",
    "OrderApplicationService",
    "PaymentApplicationService",
    "ReconciliationService",
    # Interfaces
    "IDocumentStore",
    "INotificationService",
    "IPaymentGateway",
]
