"""Domain value objects."""

from .value_objects import CENT, ExecutionID, Money, round_money
from .order_id import OrderId

__all__ = [
    "CENT",
    "ExecutionID",
    "Money",
    "OrderId",
    "round_money",
]
