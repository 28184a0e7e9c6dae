"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
from uuid import UUID, uuid4

CENT = Decimal("0.01")


def round_money(amount: Union[Decimal, int, str]) -> Decimal:
    """Round to two decimal places, half away from zero.

    CRITICAL: Always use Decimal, never float!
    """
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """
    Immutable, non-negative monetary value with currency.

    Amounts are kept at cent precision. Pricing works on plain Decimals;
    Money only carries a final amount to the gateway.
    """
    amount: Decimal
    currency: str = "PHP"

    def __post_init__(self):
        object.__setattr__(self, 'amount', round_money(self.amount))

        if self.amount < 0:
            raise ValueError(f"Money amount cannot be negative: {self.amount}")

        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def to_minor_units(self) -> int:
        """Amount in centavos, as gateways expect."""
        return int((self.amount * 100).to_integral_value(rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for tracing one transaction across log lines."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)
