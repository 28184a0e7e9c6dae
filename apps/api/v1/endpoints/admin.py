"""Operator endpoints for REST API."""

from fastapi import APIRouter, Depends

from core.application.services.reconciliation_service import ReconciliationService

from apps.api.deps import get_reconciliation_service, require_operator

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_operator)])


@router.post("/reconciliation/sweep")
async def sweep_abandoned_orders(
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> dict:
    """Settle or cancel orders left unpaid past the payment timeout."""
    report = await service.sweep_abandoned()
    return {
        "settled": report.settled,
        "cancelled": report.cancelled,
        "skipped": report.skipped,
    }
