"""Application DTOs for coupon operations."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from core.domain.enums import DiscountType


class ValidateCouponRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    total_amount: Decimal = Field(..., ge=0, description="Order subtotal before discount")

    model_config = {"frozen": True}


class CouponDTO(BaseModel):
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal
    min_purchase_amount: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    end_date: Optional[datetime] = None

    model_config = {"frozen": True}


class CouponValidationDTO(BaseModel):
    valid: bool = True
    coupon: CouponDTO
    discount_amount: Decimal

    model_config = {"frozen": True}


class AvailableCouponsDTO(BaseModel):
    coupons: List[CouponDTO] = Field(default_factory=list)

    model_config = {"frozen": True}
