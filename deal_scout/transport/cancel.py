"""
Cancellation token shared between the sequencer and a running fetch.
"""
from __future__ import annotations

import asyncio
from typing import Optional


class CancelToken:
    """One-shot cancellation signal, optionally armed with a deadline."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._timer: Optional[asyncio.TimerHandle] = None
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()
        self.release()

    def cancel_after(self, delay: float) -> None:
        """Fire :meth:`cancel` with reason ``timed out`` after *delay* seconds."""
        self.release()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self.cancel, f"timed out after {delay:g}s")

    def release(self) -> None:
        """Drop the pending deadline, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait(self) -> None:
        await self._event.wait()

    def __repr__(self) -> str:
        state = f"cancelled ({self.reason})" if self.cancelled else "active"
        return f"<CancelToken {state}>"
