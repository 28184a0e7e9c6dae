"""
Pricing & tax calculation.

Pure functions over Decimal. Line amounts are summed at full precision
and rounded once; every component of the breakdown is rounded to the
cent before the total is assembled, so the total always equals
``subtotal - discount + shipping + tax`` exactly.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..value_objects import round_money


@dataclass(frozen=True)
class PriceLine:
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class PriceBreakdown:
    """Monetary components of an order, all at cent precision."""
    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_subtotal(lines: Iterable[PriceLine]) -> Decimal:
    """Sum of unit_price * quantity, rounded at the end only."""
    raw = sum((line.unit_price * line.quantity for line in lines), Decimal("0"))
    return round_money(raw)


def compute_breakdown(
    subtotal: Decimal,
    discount_amount: Decimal,
    shipping_cost: Decimal,
    tax_rate: Decimal,
) -> PriceBreakdown:
    """
    Assemble the order totals.

    Tax applies to ``subtotal - discount + shipping``. The discount is
    expected to be already clamped to the subtotal by the coupon rules.

    Args:
        subtotal: Rounded sum of order lines
        discount_amount: Coupon discount, 0 when no coupon
        shipping_cost: Cost of the chosen shipping method
        tax_rate: Percentage between 0 and 100

    Returns:
        PriceBreakdown with a non-negative total
    """
    if tax_rate < 0 or tax_rate > 100:
        raise ValueError(f"Tax rate must be between 0 and 100, got {tax_rate}")

    subtotal = round_money(subtotal)
    discount = round_money(discount_amount)
    shipping = round_money(shipping_cost)

    taxable = subtotal - discount + shipping
    tax = round_money(taxable * Decimal(tax_rate) / 100)
    total = subtotal - discount + shipping + tax

    if total < 0:
        raise ValueError(f"Order total cannot be negative: {total}")

    return PriceBreakdown(
        subtotal=subtotal,
        discount_amount=discount,
        shipping_cost=shipping,
        tax_rate=Decimal(tax_rate),
        tax_amount=tax,
        total=total,
    )
