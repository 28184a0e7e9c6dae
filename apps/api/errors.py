"""Mapping of checkout errors to HTTP responses."""

import logging
from typing import Dict, Type

from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.domain import exceptions as errors

logger = logging.getLogger(__name__)

ERROR_STATUS: Dict[Type[errors.CheckoutError], int] = {
    errors.ProductNotFound: status.HTTP_404_NOT_FOUND,
    errors.OrderNotFound: status.HTTP_404_NOT_FOUND,
    errors.PaymentSourceNotFound: status.HTTP_404_NOT_FOUND,
    errors.InsufficientStock: status.HTTP_400_BAD_REQUEST,
    errors.InvalidCoupon: status.HTTP_400_BAD_REQUEST,
    errors.InvalidShippingMethod: status.HTTP_400_BAD_REQUEST,
    errors.AmountMismatch: status.HTTP_400_BAD_REQUEST,
    errors.OrderNotCancellable: status.HTTP_400_BAD_REQUEST,
    errors.NotEligibleForRefund: status.HTTP_409_CONFLICT,
    errors.OrderNotPayable: status.HTTP_409_CONFLICT,
    errors.InvalidStatusTransition: status.HTTP_409_CONFLICT,
    errors.InvalidWebhookSignature: status.HTTP_401_UNAUTHORIZED,
    errors.PaymentGatewayError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: errors.CheckoutError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


def error_response(exc: errors.CheckoutError, status_code: int = None) -> JSONResponse:
    return JSONResponse(status_code=status_code or status_for(exc), content=exc.to_dict())


async def checkout_error_handler(request: Request, exc: errors.CheckoutError) -> JSONResponse:
    """Handle business-rule failures raised by the application services."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}")
    return error_response(exc, status_code)
