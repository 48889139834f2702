"""Bounded retry with capped exponential backoff for remote calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

BASE_DELAY_MS = 1000
MAX_DELAY_MS = 10000


def backoff_delay(attempt: int) -> int:
    """Milliseconds to wait after failed *attempt* (1-indexed)."""
    return min(BASE_DELAY_MS * (2 ** (attempt - 1)), MAX_DELAY_MS)


async def resilient_fetch(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    timeout: float,
    label: str = "request",
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T | None:
    """Run *operation* up to *max_retries* times and return its first result.

    Each attempt is bounded by *timeout* seconds; a timeout counts as an
    ordinary failure.  Between failed attempts the coroutine sleeps for
    :func:`backoff_delay`.  When every attempt fails the last error is logged
    and ``None`` is returned; operation errors are never raised.
    """
    attempts = max(1, max_retries)
    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.wait_for(operation(), timeout=timeout)
        except asyncio.TimeoutError:
            error = f"timed out after {timeout:g}s"
        except Exception as exc:
            error = str(exc) or type(exc).__name__

        logger.warning("%s attempt %d/%d failed: %s", label, attempt, attempts, error)

        if attempt == attempts:
            logger.error("All %d %s attempts failed", attempts, label)
            return None

        delay_ms = backoff_delay(attempt)
        logger.info("Retrying %s in %dms...", label, delay_ms)
        await sleep(delay_ms / 1000)

    return None
