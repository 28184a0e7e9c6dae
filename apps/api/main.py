"""
DOSE Checkout - Main FastAPI Application.

REST layer over the checkout core: order placement, e-wallet payments,
coupons and the abandoned-order sweep.
"""
import asyncio
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.api.deps import build_reconciliation_service, get_settings
from apps.api.errors import checkout_error_handler
from apps.api.v1.endpoints import admin, coupons, orders, payments
from core.data.database import close_database, init_database
from core.domain.exceptions import CheckoutError
from core.infrastructure.logging import configure_logging

configure_logging(get_settings().checkout.log_level)
logger = logging.getLogger(__name__)


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="DOSE Checkout API",
    description="""
    Checkout backend for the DOSE online pharmacy.

    Features:
    - Atomic order placement with stock reservation
    - Coupons, shipping and tax computed server-side
    - GCash / GrabPay payments via PayMongo
    - Idempotent payment settlement and invoicing
    - Reconciliation of abandoned orders
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

_sweep_task: Optional[asyncio.Task] = None


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()
    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"← {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

app.add_exception_handler(CheckoutError, checkout_error_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "Internal server error",
            "path": request.url.path,
        },
    )


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    global _sweep_task

    settings = get_settings()
    logger.info("🚀 DOSE Checkout API starting up...")

    if settings.database.auto_create_schema:
        await init_database()

    if settings.checkout.sweep_enabled:
        service = build_reconciliation_service()
        _sweep_task = asyncio.create_task(
            service.run_forever(settings.checkout.sweep_interval_seconds)
        )


@app.on_event("shutdown")
async def shutdown_event():
    global _sweep_task

    if _sweep_task is not None:
        _sweep_task.cancel()
        try:
            await _sweep_task
        except asyncio.CancelledError:
            pass
        _sweep_task = None

    await close_database()
    logger.info("👋 DOSE Checkout API shutting down...")


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/health", tags=["health"])
async def health_check() -> dict:
    return {"status": "healthy", "service": "dose-checkout"}


app.include_router(orders.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(coupons.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
