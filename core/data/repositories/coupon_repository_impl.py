"""SQLAlchemy implementation of CouponRepository."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.coupon import Coupon
from core.domain.repositories.coupon_repository import CouponRepository

from ..mappers import CouponMapper
from ..models.coupon_model import CouponModel


class SqlAlchemyCouponRepository(CouponRepository):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        result = await self._session.execute(
            select(CouponModel)
            .where(CouponModel.code == code)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return CouponMapper.to_domain(model) if model else None

    async def list_available(self, now: datetime) -> List[Coupon]:
        result = await self._session.execute(
            select(CouponModel)
            .where(
                CouponModel.is_active.is_(True),
                CouponModel.start_date <= now,
                CouponModel.end_date >= now,
                or_(
                    CouponModel.usage_limit.is_(None),
                    CouponModel.used_count < CouponModel.usage_limit,
                ),
            )
            .order_by(CouponModel.min_purchase_amount, CouponModel.end_date)
        )
        return [CouponMapper.to_domain(model) for model in result.scalars().all()]

    async def increment_usage(self, code: str) -> Optional[Coupon]:
        # Single UPDATE so concurrent settlements cannot lose an increment
        await self._session.execute(
            update(CouponModel)
            .where(CouponModel.code == code)
            .values(used_count=CouponModel.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return await self.get_by_code(code)
