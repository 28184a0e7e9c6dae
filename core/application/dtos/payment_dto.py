"""Application DTOs for payment operations."""

from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from core.domain.enums import PaymentMethod, PaymentResult


class CreatePaymentSourceRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: str = Field(..., alias="orderId", min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Must equal the order total")
    method: PaymentMethod = Field(default=PaymentMethod.GCASH)


class PaymentSourceDTO(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    checkout_url: str = Field(..., alias="checkoutUrl")
    source_id: str = Field(..., alias="sourceId")


class VerifyPaymentRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_id: str = Field(..., alias="sourceId", min_length=1)


class PaymentStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_id: str = Field(..., alias="sourceId")
    order_id: str = Field(..., alias="orderId")
    status: PaymentResult


class WebhookAckDTO(BaseModel):
    received: bool = True
    detail: Dict[str, Any] = Field(default_factory=dict)
