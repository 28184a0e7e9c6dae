"""Order audit trail interface (Port)."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..events.base import DomainEvent


class OrderEventStore(ABC):

    @abstractmethod
    async def append(self, events: List[DomainEvent]) -> None:
        """Write events in the current transaction."""
        pass

    @abstractmethod
    async def list_for_order(self, order_id: str) -> List[Dict[str, Any]]:
        """Audit rows for one order, oldest first."""
        pass
