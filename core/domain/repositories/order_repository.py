"""Order repository interface (Port)."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from ..entities.order import Order
from ..entities.product import Refund
from ..enums import OrderStatus


class OrderRepository(ABC):
    """
    Abstract repository for Order aggregate.

    Implementations work inside the caller's transaction and never commit.
    """

    @abstractmethod
    async def add(self, order: Order) -> None:
        """
        Insert a new order together with its items.

        Args:
            order: Freshly placed order
        """
        pass

    @abstractmethod
    async def get(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        """
        Find order by id.

        Args:
            order_id: Order identifier
            for_update: Lock the row until the transaction ends

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_status(self, order: Order, expected: OrderStatus) -> bool:
        """
        Persist ``order.status`` only if the stored status is still ``expected``.

        Args:
            order: Order carrying the new status
            expected: Status the caller read before deciding

        Returns:
            True if exactly one row changed, False if another writer got there first
        """
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> List[Order]:
        """List a customer's orders, newest first."""
        pass

    @abstractmethod
    async def list_stale(self, statuses: Iterable[OrderStatus], older_than: datetime) -> List[str]:
        """
        Ids of orders still in one of ``statuses`` created before ``older_than``.
        """
        pass

    @abstractmethod
    async def add_refund(self, refund: Refund) -> Refund:
        """Store a refund request and return it with its id."""
        pass
