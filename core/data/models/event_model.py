"""SQLAlchemy ORM model for the order audit trail."""

from sqlalchemy import JSON, Column, DateTime, Integer, String

from core.domain.clock import utc_now

from .base import Base


class OrderEventModel(Base):
    """One row per domain event, written with the change it describes."""

    __tablename__ = "order_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), nullable=False, unique=True)
    event_type = Column(String(100), nullable=False, index=True)
    event_version = Column(Integer, nullable=False, default=1)
    aggregate_id = Column(String(36), nullable=False, index=True)
    aggregate_type = Column(String(50), nullable=False)
    event_data = Column(JSON, nullable=False)
    execution_id = Column(String(36), nullable=True, index=True)
    user_id = Column(String(64), nullable=True)
    occurred_at = Column(DateTime, nullable=False, default=utc_now)
