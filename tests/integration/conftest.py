"""Fixtures for API tests: the real app wired to the test database and fakes."""
import httpx
import pytest_asyncio

from apps.api import deps
from apps.api.main import app
from core.settings import AppSettings, IntegrationsSettings
from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.integrations_settings import TelegramSettings
from core.settings.modules.paymongo_settings import PayMongoSettings


@pytest_asyncio.fixture
async def client(session_factory, notifications, gateway, document_store, checkout_settings, invoice_settings):
    """HTTP client over ASGI with dependencies overridden."""
    settings = AppSettings(
        database=DatabaseSettings(),
        paymongo=PayMongoSettings(),
        checkout=checkout_settings,
        invoice=invoice_settings,
        integrations=IntegrationsSettings(telegram=TelegramSettings()),
    )
    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_session_factory] = lambda: session_factory
    app.dependency_overrides[deps.get_notification_service] = lambda: notifications
    app.dependency_overrides[deps.get_payment_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_document_store] = lambda: document_store

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
