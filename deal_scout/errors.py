# File: deal_scout/errors.py
"""deal_scout.errors: Иерархия исключений загрузчика сделок.

``Cancelled`` stands apart from the fetch failures: every retry and
failover layer lets it through untouched.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "DealScoutError",
    "Cancelled",
    "FetchError",
    "HttpError",
    "TransportError",
    "AllProxiesExhausted",
    "RetriesExhausted",
    "JobAbandoned",
]


class DealScoutError(Exception):
    """Base class for every error raised by DealScout."""


class Cancelled(DealScoutError):
    """Request was superseded, reset or ran out of time."""

    def __init__(self, reason: str = "cancelled", url: Optional[str] = None) -> None:
        self.reason = reason
        self.url = url
        super().__init__(f"Request {reason}" + (f": {url}" if url else ""))


class FetchError(DealScoutError):
    """A fetch failed in a way that may succeed on another relay or attempt."""


class HttpError(FetchError):
    """Upstream (or relay) answered with a non-2xx status."""

    def __init__(self, status: int, url: str = "") -> None:
        self.status = status
        self.url = url
        super().__init__(f"HTTP error: {status}")


class TransportError(FetchError):
    """Network failure or unreadable response body."""


class AllProxiesExhausted(FetchError):
    """Every relay of the pool was tried without success."""

    def __init__(self, url: str, last_error: Optional[FetchError] = None) -> None:
        self.url = url
        self.last_error = last_error
        super().__init__(str(last_error) if last_error else "no proxies available")


class RetriesExhausted(FetchError):
    def __init__(self, description: str, attempts: int, last_error: Optional[DealScoutError] = None) -> None:
        self.description = description
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error else f"failed after {attempts} attempts"
        super().__init__(f"{description}: {detail}" if description else detail)


class JobAbandoned(DealScoutError):
    """The sequencer gave up on a queued job after ``attempts`` failures."""

    def __init__(self, job: Any, attempts: int, last_error: DealScoutError) -> None:
        self.job = job
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(str(last_error))
