"""Application service for coupon validation."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.coupon_dto import (
    AvailableCouponsDTO,
    CouponDTO,
    CouponValidationDTO,
    ValidateCouponRequest,
)
from core.data.uow import create_uow
from core.domain.clock import utc_now
from core.domain.entities.coupon import Coupon, CouponValidation, normalize_code
from core.domain.exceptions import CouponNotFound
from core.domain.repositories.coupon_repository import CouponRepository

logger = logging.getLogger(__name__)


async def evaluate_coupon(
    coupons: CouponRepository,
    code: str,
    total: Decimal,
    now: datetime,
) -> CouponValidation:
    """
    Look up ``code`` and check it against ``total``.

    Shared by the stand-alone validation endpoint and order placement, so
    both apply the same rules. Never touches ``used_count``.

    Raises:
        CouponNotFound: Unknown, inactive, expired or used-up code
        MinimumNotMet: Total below the coupon minimum
    """
    normalized = normalize_code(code)
    coupon = await coupons.get_by_code(normalized)
    if coupon is None:
        raise CouponNotFound(normalized)
    return coupon.validate(total, now)


class CouponApplicationService:
    """Read-only coupon operations."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def validate(self, request: ValidateCouponRequest) -> CouponValidationDTO:
        """Validate a coupon against an order total.

        Args:
            request: Code and total before discount

        Returns:
            CouponValidationDTO with the discount that would apply
        """
        uow = create_uow(self._session_factory)
        async with uow:
            validation = await evaluate_coupon(
                uow.coupons, request.code, request.total_amount, self._clock()
            )
            coupon = await uow.coupons.get_by_code(validation.coupon_code)

        logger.info(
            f"Coupon {validation.coupon_code} valid for {request.total_amount}: "
            f"discount {validation.discount_amount}"
        )
        return CouponValidationDTO(
            coupon=self._coupon_to_dto(coupon),
            discount_amount=validation.discount_amount,
        )

    async def list_available(self) -> AvailableCouponsDTO:
        uow = create_uow(self._session_factory)
        async with uow:
            coupons = await uow.coupons.list_available(self._clock())
        return AvailableCouponsDTO(coupons=[self._coupon_to_dto(c) for c in coupons])

    @staticmethod
    def _coupon_to_dto(coupon: Coupon) -> CouponDTO:
        return CouponDTO(
            code=coupon.code,
            description=coupon.description,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            min_purchase_amount=coupon.min_purchase_amount,
            max_discount_amount=coupon.max_discount_amount,
            end_date=coupon.end_date,
        )
