"""Checkout reference data interface (Port)."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..entities.product import ShippingMethod


class CheckoutReferenceRepository(ABC):
    """Read-only lookups for shipping methods and tax rates."""

    @abstractmethod
    async def get_shipping_method(self, shipping_method_id: int) -> Optional[ShippingMethod]:
        """Active shipping method by id, None if unknown or disabled."""
        pass

    @abstractmethod
    async def find_tax_rate(self, country: str, state: Optional[str]) -> Optional[Decimal]:
        """
        Resolve the tax rate for an address.

        A rate for the exact state wins over the country-wide rate.

        Returns:
            Percentage rate, None if neither exists
        """
        pass
