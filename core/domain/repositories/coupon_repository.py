"""Coupon repository interface (Port)."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..entities.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Coupon]:
        """
        Find coupon by its normalized code.

        Returns:
            Coupon if found (whether or not currently applicable), None otherwise
        """
        pass

    @abstractmethod
    async def list_available(self, now: datetime) -> List[Coupon]:
        """Active coupons inside their window and below their usage cap."""
        pass

    @abstractmethod
    async def increment_usage(self, code: str) -> Optional[Coupon]:
        """Atomically add one to ``used_count`` and return the updated coupon."""
        pass
