"""Coupon endpoints for REST API."""

import logging

from fastapi import APIRouter, Depends, status

from core.application.dtos.coupon_dto import (
    AvailableCouponsDTO,
    CouponValidationDTO,
    ValidateCouponRequest,
)
from core.application.services.coupon_service import CouponApplicationService
from core.domain.exceptions import CouponNotFound

from apps.api.deps import get_coupon_service
from apps.api.errors import error_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/validate", response_model=CouponValidationDTO)
async def validate_coupon(
    request: ValidateCouponRequest,
    service: CouponApplicationService = Depends(get_coupon_service),
):
    """Preview the discount a coupon gives on a cart total."""
    try:
        return await service.validate(request)
    except CouponNotFound as e:
        # Lookup endpoint: an unknown code is a missing resource, not a bad cart
        logger.info(f"Coupon lookup miss: {e.coupon_code}")
        return error_response(e, status.HTTP_404_NOT_FOUND)


@router.get("/available", response_model=AvailableCouponsDTO)
async def available_coupons(
    service: CouponApplicationService = Depends(get_coupon_service),
) -> AvailableCouponsDTO:
    return await service.list_available()
