from __future__ import annotations

from decimal import Decimal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base import DoseBaseSettings


class CheckoutSettings(DoseBaseSettings):
    """Order, tax and reconciliation knobs."""

    model_config = SettingsConfigDict(env_prefix="CHECKOUT_")

    currency: str = "PHP"
    # Used when no tax_rates row matches the shipping address (PH VAT)
    default_tax_rate: Decimal = Field(default=Decimal("12"), ge=0, le=100)

    payment_timeout_minutes: int = Field(default=60, gt=0)
    sweep_enabled: bool = False
    sweep_interval_seconds: int = Field(default=300, gt=0)

    side_effect_timeout_seconds: float = Field(default=5.0, gt=0)

    log_level: str = "INFO"
