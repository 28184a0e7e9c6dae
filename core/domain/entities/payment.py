"""Payment source entity."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..clock import utc_now
from ..enums import PaymentResult


@dataclass
class PaymentSource:
    """
    A gateway checkout session tied to one order.

    An order may accumulate several sources when the customer retries
    after a failed or expired attempt.
    """
    order_id: str
    external_id: str
    amount: Decimal
    method: str
    checkout_url: Optional[str] = None
    result: PaymentResult = PaymentResult.PENDING
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    id: Optional[int] = None
