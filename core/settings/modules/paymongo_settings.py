from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base import DoseBaseSettings


class PayMongoSettings(DoseBaseSettings):
    """
    PayMongo gateway settings.

    With no secret key configured the application falls back to the
    in-process mock gateway.
    """

    model_config = SettingsConfigDict(env_prefix="PAYMONGO_")

    secret_key: str = ""
    webhook_secret: str = ""
    api_base_url: str = "https://api.paymongo.com/v1"
    currency: str = "PHP"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    redirect_base_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    @property
    def success_url(self) -> str:
        return f"{self.redirect_base_url.rstrip('/')}/payment/success"

    @property
    def failed_url(self) -> str:
        return f"{self.redirect_base_url.rstrip('/')}/payment/failed"
