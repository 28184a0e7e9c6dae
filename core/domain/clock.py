"""Time source for the domain.

Timestamps are naive UTC throughout, matching how they are stored.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
