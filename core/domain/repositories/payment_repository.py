"""Payment source repository interface (Port)."""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.payment import PaymentSource
from ..enums import PaymentResult


class PaymentSourceRepository(ABC):

    @abstractmethod
    async def add(self, source: PaymentSource) -> PaymentSource:
        """Insert a payment source and return it with its id."""
        pass

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> Optional[PaymentSource]:
        """
        Find payment source by gateway id.

        Args:
            external_id: Source id issued by the gateway

        Returns:
            PaymentSource if found, None otherwise
        """
        pass

    @abstractmethod
    async def record_result(self, external_id: str, result: PaymentResult) -> bool:
        """
        Set the result of a source that is still pending.

        Returns:
            True if the source moved out of pending, False if it already had a result
        """
        pass

    @abstractmethod
    async def list_pending_for_order(self, order_id: str) -> List[PaymentSource]:
        pass

    @abstractmethod
    async def find_paid_for_order(self, order_id: str) -> Optional[PaymentSource]:
        """The source that settled the order, if any."""
        pass
