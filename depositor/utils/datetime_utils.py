"""
Datetime utilities.

Provides timezone-aware datetime functions and the clock used by pollers.
"""

import asyncio
import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


class MonotonicClock:
    """
    Time source for polling loops.

    Pollers only call ``now_ms()`` and ``sleep_ms()``; tests substitute an
    object with the same two methods that advances time without waiting.
    """

    def now_ms(self) -> float:
        """Milliseconds from an arbitrary fixed origin."""
        return time.monotonic() * 1000

    async def sleep_ms(self, ms: float) -> None:
        """Suspend the calling task for ``ms`` milliseconds."""
        await asyncio.sleep(ms / 1000)
