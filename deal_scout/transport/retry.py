"""Bounded retry with linear backoff around an arbitrary fetch operation.

Only :class:`~deal_scout.errors.FetchError` is retried. ``Cancelled`` is
re-raised on the spot and does not consume an attempt.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from deal_scout.errors import FetchError, RetriesExhausted
from deal_scout.logger import logger

T = TypeVar("T")


async def fetch_with_retry(
    operation: Callable[[], Awaitable[T]],
    description: str = "",
    attempts: int = 3,
    backoff: float = 1.0,
) -> T:
    """Await ``operation()`` up to *attempts* times.

    Args:
        operation: zero-argument coroutine function performing one try.
        description: human-readable label used in logs and the final error.
        attempts: total number of tries.
        backoff: seconds to wait per attempt index (1x, 2x, ...).

    Raises:
        Cancelled: as soon as any try is cancelled.
        RetriesExhausted: when every try failed; carries the last error.
    """
    last_error: Optional[FetchError] = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except FetchError as exc:
            last_error = exc
            logger.warning("Attempt %d/%d failed (%s): %s", attempt, attempts, description, exc)
            if attempt < attempts:
                await asyncio.sleep(attempt * backoff)
    raise RetriesExhausted(description, attempts, last_error)


__all__ = ["fetch_with_retry"]
