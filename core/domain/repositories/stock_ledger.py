"""Stock ledger interface (Port)."""
from abc import ABC, abstractmethod

from ..entities.product import StockLevel


class StockLedger(ABC):
    """
    Transactional access to product stock.

    All three operations run in the caller's transaction, so a rollback
    undoes every decrement and restore made through the ledger.
    """

    @abstractmethod
    async def check_and_lock(self, product_id: int, required_qty: int) -> StockLevel:
        """
        Lock the product row and confirm enough stock is available.

        Raises:
            ProductNotFound: Unknown or inactive product
            InsufficientStock: Fewer than ``required_qty`` units available
        """
        pass

    @abstractmethod
    async def decrement(self, product_id: int, qty: int) -> None:
        """
        Take ``qty`` units out of stock.

        Raises:
            InsufficientStock: The guarded update matched no row
        """
        pass

    @abstractmethod
    async def restore(self, product_id: int, qty: int) -> None:
        """Put ``qty`` units back into stock."""
        pass
