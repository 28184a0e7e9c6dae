"""SQLAlchemy ORM models for catalog and checkout reference data."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)

from core.domain.clock import utc_now

from .base import Base


class ProductModel(Base):
    """Products with their stock counter."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(50), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    reorder_threshold = Column(Integer, nullable=False, default=10)
    is_active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)


class ShippingMethodModel(Base):
    __tablename__ = "shipping_methods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    base_cost = Column(Numeric(10, 2), nullable=False)
    estimated_days = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class TaxRateModel(Base):
    """Tax rate per country, optionally narrowed to a state."""

    __tablename__ = "tax_rates"
    __table_args__ = (
        UniqueConstraint("country", "state", name="uq_tax_rates_country_state"),
        CheckConstraint("rate >= 0 AND rate <= 100", name="ck_tax_rates_rate_range"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    country = Column(String(100), nullable=False)
    state = Column(String(100), nullable=True)
    rate = Column(Numeric(5, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
