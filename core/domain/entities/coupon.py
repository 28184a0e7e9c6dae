"""
Coupon entity and discount rules.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..enums import DiscountType
from ..exceptions import CouponNotFound, MinimumNotMet
from ..value_objects import round_money


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class CouponValidation:
    """Outcome of a successful coupon check."""
    coupon_code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_discount_amount: Optional[Decimal]
    min_purchase_amount: Optional[Decimal]
    discount_amount: Decimal


@dataclass
class Coupon:
    """Discount code with validity window and usage cap."""
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    min_purchase_amount: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    is_active: bool = True
    description: Optional[str] = None
    id: Optional[int] = None

    def is_available(self, now: datetime) -> bool:
        """Active, inside its window and below its usage cap."""
        if not self.is_active:
            return False
        if not (self.start_date <= now <= self.end_date):
            return False
        if self.usage_limit is not None and self.used_count >= self.usage_limit:
            return False
        return True

    def compute_discount(self, total: Decimal) -> Decimal:
        """Discount for ``total``, clamped to the cap and to the total itself."""
        if self.discount_type is DiscountType.PERCENTAGE:
            raw = total * self.discount_value / 100
        else:
            raw = self.discount_value

        if self.max_discount_amount is not None:
            raw = min(raw, self.max_discount_amount)

        return round_money(max(Decimal("0"), min(raw, total)))

    def validate(self, total: Decimal, now: datetime) -> CouponValidation:
        """
        Check applicability against an order total.

        Raises:
            CouponNotFound: Inactive, outside its window, or used up
            MinimumNotMet: Total below min_purchase_amount
        """
        if not self.is_available(now):
            raise CouponNotFound(self.code)

        if self.min_purchase_amount is not None and total < self.min_purchase_amount:
            raise MinimumNotMet(self.code, self.min_purchase_amount)

        return CouponValidation(
            coupon_code=self.code,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            max_discount_amount=self.max_discount_amount,
            min_purchase_amount=self.min_purchase_amount,
            discount_amount=self.compute_discount(total),
        )
