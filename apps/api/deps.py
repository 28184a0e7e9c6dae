"""FastAPI dependencies for dependency injection."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import IDocumentStore, INotificationService, IPaymentGateway
from core.application.services import (
    CouponApplicationService,
    InvoiceApplicationService,
    OrderApplicationService,
    PaymentApplicationService,
    ReconciliationService,
)
from core.data import database
from core.settings import AppSettings, get_app_settings

logger = logging.getLogger(__name__)


def get_settings() -> AppSettings:
    return get_app_settings()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get SQLAlchemy session factory.

    Returns:
        async_sessionmaker instance
    """
    return database.get_session_factory()


# =============================================================================
# SINGLETON ADAPTERS
# =============================================================================

@lru_cache()
def _notification_service() -> INotificationService:
    settings = get_app_settings().telegram
    if settings.enabled:
        from core.infrastructure.adapters.notifications.telegram_notification_service import (
            TelegramNotificationService,
        )
        return TelegramNotificationService(settings)

    from core.infrastructure.adapters.notifications.mock_notification_service import (
        MockNotificationService,
    )
    return MockNotificationService()


@lru_cache()
def _payment_gateway() -> IPaymentGateway:
    settings = get_app_settings().paymongo
    if settings.enabled:
        from core.infrastructure.adapters.payments.paymongo_gateway import PayMongoGateway
        return PayMongoGateway(settings)

    logger.warning("PAYMONGO_SECRET_KEY not set, using the mock payment gateway")
    from core.infrastructure.adapters.payments.mock_gateway import MockPaymentGateway
    return MockPaymentGateway()


@lru_cache()
def _document_store() -> IDocumentStore:
    from core.infrastructure.adapters.storage.local_document_store import LocalDocumentStore
    return LocalDocumentStore(get_app_settings().invoice.storage_dir)


def get_notification_service() -> INotificationService:
    return _notification_service()


def get_payment_gateway() -> IPaymentGateway:
    return _payment_gateway()


def get_document_store() -> IDocumentStore:
    return _document_store()


# =============================================================================
# APPLICATION SERVICES
# =============================================================================

def get_order_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    notifications: INotificationService = Depends(get_notification_service),
    settings: AppSettings = Depends(get_settings),
) -> OrderApplicationService:
    return OrderApplicationService(session_factory, notifications, settings.checkout)


def get_coupon_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> CouponApplicationService:
    return CouponApplicationService(session_factory)


def get_invoice_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    store: IDocumentStore = Depends(get_document_store),
    settings: AppSettings = Depends(get_settings),
) -> InvoiceApplicationService:
    return InvoiceApplicationService(session_factory, store, settings.invoice)


def get_payment_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    gateway: IPaymentGateway = Depends(get_payment_gateway),
    notifications: INotificationService = Depends(get_notification_service),
    invoices: InvoiceApplicationService = Depends(get_invoice_service),
    settings: AppSettings = Depends(get_settings),
) -> PaymentApplicationService:
    return PaymentApplicationService(
        session_factory, gateway, notifications, invoices, settings.checkout
    )


def get_reconciliation_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    payments: PaymentApplicationService = Depends(get_payment_service),
    notifications: INotificationService = Depends(get_notification_service),
    settings: AppSettings = Depends(get_settings),
) -> ReconciliationService:
    return ReconciliationService(session_factory, payments, notifications, settings.checkout)


def build_reconciliation_service() -> ReconciliationService:
    """Same wiring as the request dependencies, for the background sweep."""
    settings = get_app_settings()
    session_factory = get_session_factory()
    notifications = get_notification_service()
    invoices = InvoiceApplicationService(session_factory, get_document_store(), settings.invoice)
    payments = PaymentApplicationService(
        session_factory, get_payment_gateway(), notifications, invoices, settings.checkout
    )
    return ReconciliationService(session_factory, payments, notifications, settings.checkout)


# =============================================================================
# CALLER IDENTITY (issued by the upstream auth gateway)
# =============================================================================

def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()


def require_operator(x_user_role: Optional[str] = Header(None, alias="X-User-Role")) -> str:
    if x_user_role != "operator":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operator role required",
        )
    return x_user_role
