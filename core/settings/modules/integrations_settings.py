from __future__ import annotations

from typing import Optional

from pydantic import Field

from core.settings.base import DoseBaseSettings


class TelegramSettings(DoseBaseSettings):
    """
    Telegram integration settings.
    Loaded from .env file with exact variable name matching.
    """

    enabled: bool = Field(default=False, alias="DOSE_TELEGRAM_ENABLED")
    token: str = Field(default="", alias="TELEGRAM_BOT_TOKEN")
    chat_id: Optional[int] = Field(default=None, alias="TELEGRAM_CHAT_ID")
    prefix: str = Field(default="[DOSE]", alias="DOSE_TELEGRAM_PREFIX")
    timeout_seconds: float = Field(default=5.0, alias="DOSE_TELEGRAM_TIMEOUT_SECONDS")
