"""SQLAlchemy implementation of StockLedger."""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.product import StockLevel
from core.domain.exceptions import InsufficientStock, ProductNotFound
from core.domain.repositories.stock_ledger import StockLedger

from ..mappers import CatalogMapper
from ..models.catalog_model import ProductModel

logger = logging.getLogger(__name__)


class SqlAlchemyStockLedger(StockLedger):
    """
    Stock counter on the ``products`` table.

    ``check_and_lock`` takes a row lock (FOR UPDATE) on databases that
    support it. ``decrement`` is additionally guarded by
    ``stock_quantity >= qty`` in its WHERE clause, so stock cannot go
    negative even where the lock is a no-op (SQLite).
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def check_and_lock(self, product_id: int, required_qty: int) -> StockLevel:
        result = await self._session.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()

        if model is None or not model.is_active:
            raise ProductNotFound(product_id)

        if model.stock_quantity < required_qty:
            raise InsufficientStock(product_id, model.stock_quantity, required_qty)

        return CatalogMapper.stock_level(model)

    async def decrement(self, product_id: int, qty: int) -> None:
        result = await self._session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock_quantity >= qty)
            .values(stock_quantity=ProductModel.stock_quantity - qty)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            available = await self._session.scalar(
                select(ProductModel.stock_quantity).where(ProductModel.id == product_id)
            )
            logger.warning(
                f"Guarded decrement refused for product {product_id}: "
                f"{available} available, {qty} requested"
            )
            raise InsufficientStock(product_id, available or 0, qty)

    async def restore(self, product_id: int, qty: int) -> None:
        await self._session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock_quantity=ProductModel.stock_quantity + qty)
            .execution_options(synchronize_session=False)
        )
