"""SQLAlchemy implementation of CheckoutReferenceRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.product import ShippingMethod
from core.domain.repositories.reference_repository import CheckoutReferenceRepository

from ..mappers import CatalogMapper, to_decimal
from ..models.catalog_model import ShippingMethodModel, TaxRateModel


class SqlAlchemyCheckoutReferenceRepository(CheckoutReferenceRepository):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_shipping_method(self, shipping_method_id: int) -> Optional[ShippingMethod]:
        model = await self._session.get(ShippingMethodModel, shipping_method_id)
        if model is None or not model.is_active:
            return None
        return CatalogMapper.shipping_method(model)

    async def find_tax_rate(self, country: str, state: Optional[str]) -> Optional[Decimal]:
        if state:
            rate = await self._session.scalar(
                select(TaxRateModel.rate).where(
                    TaxRateModel.country == country,
                    TaxRateModel.state == state,
                    TaxRateModel.is_active.is_(True),
                )
            )
            if rate is not None:
                return to_decimal(rate)

        rate = await self._session.scalar(
            select(TaxRateModel.rate).where(
                TaxRateModel.country == country,
                TaxRateModel.state.is_(None),
                TaxRateModel.is_active.is_(True),
            )
        )
        return to_decimal(rate)
