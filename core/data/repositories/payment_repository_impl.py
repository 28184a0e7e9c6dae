"""SQLAlchemy implementation of PaymentSourceRepository."""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.clock import utc_now
from core.domain.entities.payment import PaymentSource
from core.domain.enums import PaymentResult
from core.domain.repositories.payment_repository import PaymentSourceRepository

from ..mappers import PaymentSourceMapper
from ..models.payment_model import PaymentSourceModel


class SqlAlchemyPaymentSourceRepository(PaymentSourceRepository):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, source: PaymentSource) -> PaymentSource:
        model = PaymentSourceMapper.to_persistence(source)
        self._session.add(model)
        await self._session.flush()
        return PaymentSourceMapper.to_domain(model)

    async def get_by_external_id(self, external_id: str) -> Optional[PaymentSource]:
        result = await self._session.execute(
            select(PaymentSourceModel)
            .where(PaymentSourceModel.external_id == external_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return PaymentSourceMapper.to_domain(model) if model else None

    async def record_result(self, external_id: str, result: PaymentResult) -> bool:
        outcome = await self._session.execute(
            update(PaymentSourceModel)
            .where(
                PaymentSourceModel.external_id == external_id,
                PaymentSourceModel.result == PaymentResult.PENDING.value,
            )
            .values(result=result.value, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return outcome.rowcount == 1

    async def list_pending_for_order(self, order_id: str) -> List[PaymentSource]:
        result = await self._session.execute(
            select(PaymentSourceModel)
            .where(
                PaymentSourceModel.order_id == order_id,
                PaymentSourceModel.result == PaymentResult.PENDING.value,
            )
            .order_by(PaymentSourceModel.created_at.desc())
        )
        return [PaymentSourceMapper.to_domain(model) for model in result.scalars().all()]

    async def find_paid_for_order(self, order_id: str) -> Optional[PaymentSource]:
        result = await self._session.execute(
            select(PaymentSourceModel)
            .where(
                PaymentSourceModel.order_id == order_id,
                PaymentSourceModel.result == PaymentResult.PAID.value,
            )
            .order_by(PaymentSourceModel.updated_at, PaymentSourceModel.id)
            .limit(1)
        )
        model = result.scalar_one_or_none()
        return PaymentSourceMapper.to_domain(model) if model else None
