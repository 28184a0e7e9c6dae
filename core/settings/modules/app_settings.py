from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.modules.checkout_settings import CheckoutSettings
from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.integrations_settings import TelegramSettings
from core.settings.modules.invoice_settings import InvoiceSettings
from core.settings.modules.paymongo_settings import PayMongoSettings


class IntegrationsSettings(BaseModel):
    """Aggregates integrations settings as nested objects."""

    model_config = ConfigDict(extra="ignore")

    telegram: TelegramSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    database: DatabaseSettings
    paymongo: PayMongoSettings
    checkout: CheckoutSettings
    invoice: InvoiceSettings
    integrations: IntegrationsSettings

    @property
    def telegram(self) -> TelegramSettings:
        return self.integrations.telegram


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        database=DatabaseSettings(),
        paymongo=PayMongoSettings(),
        checkout=CheckoutSettings(),
        invoice=InvoiceSettings(),
        integrations=IntegrationsSettings(
            telegram=TelegramSettings(),
        ),
    )
