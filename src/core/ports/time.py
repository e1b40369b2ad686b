"""
Time and timer adapter interfaces.

All timestamps are UTC. Timers drive the dwell gate and the feedback
display windows; they run on the event loop and are cancelled
deterministically through their handle.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Protocol

TimerCallback = Callable[[], Awaitable[None] | None]


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        """Cancel the callback. No-op if already fired or cancelled."""
        ...

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called."""
        ...


class TimerPort(Protocol):
    """
    One-shot timer scheduler.

    Callbacks may be plain functions or coroutine functions; coroutine
    callbacks are awaited on the event loop.
    """

    def schedule(self, delay_ms: int, callback: TimerCallback) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        ...
