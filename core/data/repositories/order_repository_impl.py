"""SQLAlchemy implementation of OrderRepository."""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.order import Order
from core.domain.entities.product import Refund
from core.domain.enums import OrderStatus
from core.domain.repositories.order_repository import OrderRepository

from ..mappers import OrderMapper, RefundMapper
from ..models.order_model import OrderModel


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, order: Order) -> None:
        self._session.add(OrderMapper.to_persistence(order))
        await self._session.flush()  # Propagate to DB without committing

    async def get(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        """Retrieve order by id, optionally locking its row.

        Args:
            order_id: Order identifier
            for_update: Emit SELECT ... FOR UPDATE

        Returns:
            Order if found, None otherwise
        """
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(
            stmt.execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()

        if not model:
            return None

        return OrderMapper.to_domain(model)

    async def update_status(self, order: Order, expected: OrderStatus) -> bool:
        """Conditional status write, the guard against concurrent transitions.

        Args:
            order: Order carrying the new status
            expected: Status that must still be stored

        Returns:
            True if the row was updated
        """
        result = await self._session.execute(
            update(OrderModel)
            .where(OrderModel.id == order.id, OrderModel.status == expected.value)
            .values(status=order.status.value, updated_at=order.updated_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> List[Order]:
        result = await self._session.execute(
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]

    async def list_stale(self, statuses: Iterable[OrderStatus], older_than: datetime) -> List[str]:
        result = await self._session.execute(
            select(OrderModel.id)
            .where(
                OrderModel.status.in_([status.value for status in statuses]),
                OrderModel.created_at < older_than,
            )
            .order_by(OrderModel.created_at)
        )
        return list(result.scalars().all())

    async def add_refund(self, refund: Refund) -> Refund:
        model = RefundMapper.to_persistence(refund)
        self._session.add(model)
        await self._session.flush()
        return RefundMapper.to_domain(model)
