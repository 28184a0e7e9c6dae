"""Catalog product as seen by checkout."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class StockLevel:
    """Locked snapshot of a product row."""
    product_id: int
    name: str
    price: Decimal
    available: int
    reorder_threshold: int = 0
    unit: Optional[str] = None

    def is_low_after(self, quantity: int) -> bool:
        return self.available - quantity <= self.reorder_threshold


@dataclass(frozen=True)
class ShippingMethod:
    id: int
    name: str
    base_cost: Decimal
    estimated_days: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Refund:
    order_id: str
    user_id: str
    reason: str
    amount: Decimal
    status: str = "requested"
    details: Optional[str] = None
    id: Optional[int] = None
