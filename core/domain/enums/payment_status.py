"""Payment and discount enums."""
from enum import Enum


class PaymentResult(str, Enum):
    """Outcome of a payment source as last observed from the gateway."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentResult.PENDING


class PaymentMethod(str, Enum):
    """E-wallet methods supported by the gateway."""

    GCASH = "gcash"
    GRAB_PAY = "grab_pay"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
