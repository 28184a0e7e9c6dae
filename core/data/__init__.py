"""Data layer - infrastructure persistence and mapping."""

from .mappers import OrderItemMapper, OrderMapper
from .models import Base
from .uow import UnitOfWork, create_uow

__all__ = [
    "Base",
    "create_uow",
    "OrderItemMapper",
    "OrderMapper",
    "UnitOfWork",
]
