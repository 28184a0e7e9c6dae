"""Payment endpoints for REST API."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from core.application.dtos.payment_dto import (
    CreatePaymentSourceRequest,
    PaymentSourceDTO,
    PaymentStatusDTO,
    VerifyPaymentRequest,
    WebhookAckDTO,
)
from core.application.services.payment_service import PaymentApplicationService

from apps.api.deps import get_current_user_id, get_payment_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-source", response_model=PaymentSourceDTO, status_code=201)
async def create_payment_source(
    request: CreatePaymentSourceRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentApplicationService = Depends(get_payment_service),
) -> PaymentSourceDTO:
    """Start an e-wallet payment; the client redirects to ``checkoutUrl``."""
    return await service.initiate_payment(user_id, request)


@router.post("/verify", response_model=PaymentStatusDTO)
async def verify_payment(
    request: VerifyPaymentRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentApplicationService = Depends(get_payment_service),
) -> PaymentStatusDTO:
    """Called by the client after the wallet redirects back."""
    return await service.verify_and_settle(request.source_id, user_id)


@router.post("/webhook", response_model=WebhookAckDTO)
async def payment_webhook(
    request: Request,
    paymongo_signature: Optional[str] = Header(None, alias="Paymongo-Signature"),
    service: PaymentApplicationService = Depends(get_payment_service),
) -> WebhookAckDTO:
    """Gateway callback; authenticated by signature, not by user."""
    payload = await request.body()
    logger.info(f"📨 Payment webhook received ({len(payload)} bytes)")
    return await service.handle_webhook(payload, paymongo_signature)
