"""
Shared fixtures.

Each test gets its own file-backed SQLite database (separate connections
are needed for the concurrency tests) seeded with a small catalog:

    products         1 Paracetamol 100.00 x50, 2 Amoxicillin 450.00 x5
                     (reorder at 3), 3 Vitamin C 250.00 x100, 4 inactive
    shipping         1 Standard 50.00, 2 Express 150.00, 3 inactive
    tax rates        PH 12%, US 6%, US/CA 7.25%
    coupons          WELCOME10, FLAT100, BIG50 usable; EXPIRED5, USEDUP,
                     PAUSED not
"""
from datetime import timedelta
from decimal import Decimal

import pytest
import pytest_asyncio

from sqlalchemy import func, select

from core.application.dtos.order_dto import OrderLineRequest, PlaceOrderRequest, ShippingAddressDTO
from core.application.dtos.payment_dto import CreatePaymentSourceRequest
from core.application.services import (
    CouponApplicationService,
    InvoiceApplicationService,
    OrderApplicationService,
    PaymentApplicationService,
)
from core.data.database import create_engine, create_session_factory
from core.data.models import (
    Base,
    CouponModel,
    ProductModel,
    ShippingMethodModel,
    TaxRateModel,
)
from core.domain.clock import utc_now
from core.domain.enums import PaymentResult
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.payments.mock_gateway import MockPaymentGateway
from core.infrastructure.adapters.storage.local_document_store import LocalDocumentStore
from core.settings.modules.checkout_settings import CheckoutSettings
from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.invoice_settings import InvoiceSettings


def _seed_rows():
    now = utc_now()
    window = dict(start_date=now - timedelta(days=30), end_date=now + timedelta(days=30))
    return [
        ProductModel(id=1, name="Paracetamol 500mg", unit="box of 20",
                     price=Decimal("100.00"), stock_quantity=50, reorder_threshold=10),
        ProductModel(id=2, name="Amoxicillin 500mg", unit="box of 21",
                     price=Decimal("450.00"), stock_quantity=5, reorder_threshold=3),
        ProductModel(id=3, name="Vitamin C 1000mg", price=Decimal("250.00"),
                     stock_quantity=100, reorder_threshold=10),
        ProductModel(id=4, name="Cough syrup (recalled)", price=Decimal("80.00"),
                     stock_quantity=10, is_active=False),
        ShippingMethodModel(id=1, name="Standard", base_cost=Decimal("50.00"), estimated_days="3-5"),
        ShippingMethodModel(id=2, name="Express", base_cost=Decimal("150.00"), estimated_days="1"),
        ShippingMethodModel(id=3, name="Same day", base_cost=Decimal("300.00"), is_active=False),
        TaxRateModel(country="PH", state=None, rate=Decimal("12.00")),
        TaxRateModel(country="US", state=None, rate=Decimal("6.00")),
        TaxRateModel(country="US", state="CA", rate=Decimal("7.25")),
        CouponModel(code="WELCOME10", discount_type="percentage", discount_value=Decimal("10"),
                    min_purchase_amount=Decimal("1000.00"), max_discount_amount=Decimal("500.00"),
                    **window),
        CouponModel(code="FLAT100", discount_type="fixed", discount_value=Decimal("100.00"),
                    min_purchase_amount=Decimal("500.00"), **window),
        CouponModel(code="BIG50", discount_type="percentage", discount_value=Decimal("50"),
                    max_discount_amount=Decimal("200.00"), **window),
        CouponModel(code="EXPIRED5", discount_type="percentage", discount_value=Decimal("5"),
                    start_date=now - timedelta(days=60), end_date=now - timedelta(days=1)),
        CouponModel(code="USEDUP", discount_type="fixed", discount_value=Decimal("50.00"),
                    usage_limit=1, used_count=1, **window),
        CouponModel(code="PAUSED", discount_type="fixed", discount_value=Decimal("20.00"),
                    is_active=False, **window),
    ]


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create test database engine on a fresh SQLite file."""
    settings = DatabaseSettings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'checkout.db'}")
    engine = create_engine(settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Session factory over a seeded database."""
    factory = create_session_factory(test_engine)
    async with factory() as session:
        session.add_all(_seed_rows())
        await session.commit()
    yield factory


@pytest.fixture
def notifications():
    return MockNotificationService()


@pytest.fixture
def gateway():
    return MockPaymentGateway()


@pytest.fixture
def document_store(tmp_path):
    return LocalDocumentStore(str(tmp_path / "invoices"))


@pytest.fixture
def checkout_settings():
    return CheckoutSettings(side_effect_timeout_seconds=1.0, payment_timeout_minutes=60)


@pytest.fixture
def invoice_settings(tmp_path):
    return InvoiceSettings(storage_dir=str(tmp_path / "invoices"))


@pytest.fixture
def order_service(session_factory, notifications, checkout_settings):
    return OrderApplicationService(session_factory, notifications, checkout_settings)


@pytest.fixture
def coupon_service(session_factory):
    return CouponApplicationService(session_factory)


@pytest.fixture
def invoice_service(session_factory, document_store, invoice_settings):
    return InvoiceApplicationService(session_factory, document_store, invoice_settings)


@pytest.fixture
def payment_service(session_factory, gateway, notifications, invoice_service, checkout_settings):
    return PaymentApplicationService(
        session_factory, gateway, notifications, invoice_service, checkout_settings
    )


@pytest.fixture
def order_request():
    """Build a PlaceOrderRequest from ``(product_id, quantity)`` pairs."""

    def build(*lines, coupon_code=None, shipping_method_id=1, country="PH", state=None):
        return PlaceOrderRequest(
            items=[OrderLineRequest(product_id=p, quantity=q) for p, q in lines],
            shipping_address=ShippingAddressDTO(
                street="12 Mabini St",
                city="Quezon City",
                state=state,
                country=country,
                postal_code="1100",
            ),
            shipping_method_id=shipping_method_id,
            coupon_code=coupon_code,
        )

    return build


@pytest.fixture
def pay(payment_service, gateway):
    """Take an order through create-source and a successful wallet payment."""

    async def settle(order, user_id="user-1"):
        source = await payment_service.initiate_payment(
            user_id, CreatePaymentSourceRequest(order_id=order.order_id, amount=order.total)
        )
        gateway.set_status(source.source_id, PaymentResult.PAID)
        return await payment_service.verify_and_settle(source.source_id, user_id)

    return settle


@pytest.fixture
def stock_of(session_factory):
    async def read(product_id: int) -> int:
        async with session_factory() as session:
            return await session.scalar(
                select(ProductModel.stock_quantity).where(ProductModel.id == product_id)
            )

    return read


@pytest.fixture
def count_rows(session_factory):
    async def count(model, *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        async with session_factory() as session:
            return await session.scalar(stmt)

    return count
