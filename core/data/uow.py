"""Unit of Work pattern for atomic transactions."""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities.order import Order
from core.domain.value_objects import ExecutionID

from .repositories import (
    SqlAlchemyCheckoutReferenceRepository,
    SqlAlchemyCouponRepository,
    SqlAlchemyOrderEventStore,
    SqlAlchemyOrderRepository,
    SqlAlchemyPaymentSourceRepository,
    SqlAlchemyStockLedger,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern for atomic transactions.

    Responsibilities:
    1. Manage SQLAlchemy session lifecycle
    2. Propagate ExecutionID across all operations
    3. Atomic commit/rollback of all repository operations
    4. Write events of tracked aggregates to the audit trail on commit
    5. Lazy initialization of repositories

    Leaving the context without ``commit()`` rolls everything back.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._execution_id: Optional[ExecutionID] = None
        self._tracked: List[Order] = []

        # Lazy-loaded repositories
        self._orders: Optional[SqlAlchemyOrderRepository] = None
        self._stock: Optional[SqlAlchemyStockLedger] = None
        self._coupons: Optional[SqlAlchemyCouponRepository] = None
        self._payments: Optional[SqlAlchemyPaymentSourceRepository] = None
        self._reference: Optional[SqlAlchemyCheckoutReferenceRepository] = None
        self._events: Optional[SqlAlchemyOrderEventStore] = None

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        self._execution_id = ExecutionID.generate()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rollback anything uncommitted, then release the session."""
        try:
            if exc_type is not None:
                logger.debug(f"[{self._execution_id}] Rolling back after {exc_type.__name__}")
            await self._session.rollback()
        finally:
            await self._session.close()
            self._tracked.clear()

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def execution_id(self) -> ExecutionID:
        """Get current execution ID for tracing.

        Returns:
            ExecutionID value object
        """
        if self._execution_id is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._execution_id

    @property
    def session(self) -> AsyncSession:
        return self._require_session()

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        """Lazy-load order repository.

        Returns:
            SqlAlchemyOrderRepository instance
        """
        if self._orders is None:
            self._orders = SqlAlchemyOrderRepository(self._require_session())
        return self._orders

    @property
    def stock(self) -> SqlAlchemyStockLedger:
        if self._stock is None:
            self._stock = SqlAlchemyStockLedger(self._require_session())
        return self._stock

    @property
    def coupons(self) -> SqlAlchemyCouponRepository:
        if self._coupons is None:
            self._coupons = SqlAlchemyCouponRepository(self._require_session())
        return self._coupons

    @property
    def payments(self) -> SqlAlchemyPaymentSourceRepository:
        if self._payments is None:
            self._payments = SqlAlchemyPaymentSourceRepository(self._require_session())
        return self._payments

    @property
    def reference(self) -> SqlAlchemyCheckoutReferenceRepository:
        if self._reference is None:
            self._reference = SqlAlchemyCheckoutReferenceRepository(self._require_session())
        return self._reference

    @property
    def events(self) -> SqlAlchemyOrderEventStore:
        if self._events is None:
            self._events = SqlAlchemyOrderEventStore(self._require_session())
        return self._events

    def track(self, order: Order) -> Order:
        """Register an aggregate whose events must be written on commit."""
        if not any(tracked is order for tracked in self._tracked):
            self._tracked.append(order)
        return order

    async def commit(self) -> None:
        """Write tracked events, then commit all pending changes."""
        session = self._require_session()

        execution_id = str(self.execution_id)
        for order in self._tracked:
            events = order.get_events()
            for event in events:
                if event.execution_id is None:
                    event.execution_id = execution_id
            await self.events.append(events)
            order.clear_events()

        await session.commit()


def create_uow(session_factory: async_sessionmaker) -> UnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory)
