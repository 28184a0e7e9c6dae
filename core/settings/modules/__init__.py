# Settings modules
from .app_settings import AppSettings, get_app_settings, IntegrationsSettings
from .checkout_settings import CheckoutSettings
from .database_settings import DatabaseSettings
from .integrations_settings import TelegramSettings
from .invoice_settings import InvoiceSettings
from .paymongo_settings import PayMongoSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "IntegrationsSettings",
    "CheckoutSettings",
    "DatabaseSettings",
    "InvoiceSettings",
    "PayMongoSettings",
    "TelegramSettings",
]
