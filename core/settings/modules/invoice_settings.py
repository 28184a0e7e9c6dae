from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base import DoseBaseSettings


class InvoiceSettings(DoseBaseSettings):
    model_config = SettingsConfigDict(env_prefix="INVOICE_")

    storage_dir: str = "uploads/invoices"
    company_name: str = "DOSE Pharmacy"
