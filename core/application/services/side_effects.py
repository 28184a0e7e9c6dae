"""Best-effort execution of post-commit side effects."""

import asyncio
import logging
from typing import Any, Awaitable, Optional

logger = logging.getLogger(__name__)


async def run_best_effort(label: str, action: Awaitable[Any], timeout: float) -> Optional[Any]:
    """
    Await ``action`` for at most ``timeout`` seconds.

    Failures and timeouts are logged and swallowed: the business
    operation that triggered the side effect has already committed.

    Returns:
        The action's result, or None if it failed
    """
    try:
        return await asyncio.wait_for(action, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"⏱️ {label} timed out after {timeout}s")
    except Exception as e:
        logger.error(f"❌ {label} failed: {e}", exc_info=True)
    return None
