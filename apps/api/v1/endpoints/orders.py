"""Order endpoints for REST API."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from core.application.dtos.order_dto import (
    OrderDTO,
    OrderListDTO,
    PlaceOrderRequest,
    RefundDTO,
    RefundRequest,
    UpdateOrderStatusRequest,
)
from core.application.services.order_service import OrderApplicationService

from apps.api.deps import get_current_user_id, get_order_service, require_operator

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderDTO, status_code=201)
async def place_order(
    request: PlaceOrderRequest,
    user_id: str = Depends(get_current_user_id),
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderDTO:
    """Place an order.

    Prices, discount, shipping and tax are computed server-side; stock is
    reserved in the same transaction.
    """
    return await service.place_order(user_id, request)


@router.get("", response_model=OrderListDTO)
async def list_orders(
    limit: int = Query(default=20, ge=1, le=100, description="Maximum number of orders"),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderListDTO:
    return await service.list_orders(user_id, limit=limit, offset=offset)


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderDTO:
    return await service.get_order(order_id, user_id)


@router.post("/{order_id}/cancel", response_model=OrderDTO)
async def cancel_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderDTO:
    """Cancel a pending order; its stock goes back on the shelf."""
    return await service.cancel_order(order_id, user_id)


@router.post("/{order_id}/refund", response_model=RefundDTO, status_code=201)
async def request_refund(
    order_id: str,
    request: RefundRequest,
    user_id: str = Depends(get_current_user_id),
    service: OrderApplicationService = Depends(get_order_service),
) -> RefundDTO:
    return await service.request_refund(order_id, user_id, request)


@router.patch("/{order_id}/status", response_model=OrderDTO, dependencies=[Depends(require_operator)])
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderDTO:
    """Fulfilment transitions, operators only."""
    return await service.advance_status(order_id, request)


@router.get("/{order_id}/history", dependencies=[Depends(require_operator)])
async def get_order_history(
    order_id: str,
    service: OrderApplicationService = Depends(get_order_service),
) -> List[Dict[str, Any]]:
    return await service.get_history(order_id)
