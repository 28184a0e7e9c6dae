"""SQLAlchemy ORM model for payment_sources table."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from core.domain.clock import utc_now

from .base import Base


class PaymentSourceModel(Base):
    __tablename__ = "payment_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    external_id = Column(String(100), nullable=False, unique=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(20), nullable=False)
    checkout_url = Column(Text, nullable=True)
    result = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
