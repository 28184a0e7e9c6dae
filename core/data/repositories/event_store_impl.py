"""SQLAlchemy implementation of OrderEventStore."""

from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.events.base import DomainEvent
from core.domain.repositories.event_store import OrderEventStore

from ..models.event_model import OrderEventModel


class SqlAlchemyOrderEventStore(OrderEventStore):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, events: List[DomainEvent]) -> None:
        for event in events:
            self._session.add(
                OrderEventModel(
                    event_id=event.event_id,
                    event_type=event.event_type,
                    event_version=event.event_version,
                    aggregate_id=event.aggregate_id,
                    aggregate_type=event.aggregate_type,
                    event_data=event.event_data(),
                    execution_id=event.execution_id,
                    user_id=event.user_id,
                    occurred_at=event.occurred_at,
                )
            )
        await self._session.flush()

    async def list_for_order(self, order_id: str) -> List[Dict[str, Any]]:
        result = await self._session.execute(
            select(OrderEventModel)
            .where(OrderEventModel.aggregate_id == order_id)
            .order_by(OrderEventModel.id)
        )
        return [
            {
                "event_id": row.event_id,
                "event_type": row.event_type,
                "execution_id": row.execution_id,
                "user_id": row.user_id,
                "occurred_at": row.occurred_at.isoformat(),
                "data": row.event_data,
            }
            for row in result.scalars().all()
        ]
