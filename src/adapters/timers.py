"""
Timer adapters.

- AsyncioTimers: production scheduler on the running event loop
  (loop.call_later); coroutine callbacks become tracked tasks.
- ManualTimers: deterministic scheduler for tests/dev; time only moves when
  advance() is awaited.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass, field

from src.core.ports.time import TimerCallback

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTimer:
    """Handle returned by both adapters."""

    due_ms: int
    callback: TimerCallback
    fired: bool = False
    _cancelled: bool = False
    _loop_handle: asyncio.TimerHandle | None = field(default=None, repr=False)

    def cancel(self) -> None:
        self._cancelled = True
        if self._loop_handle is not None:
            self._loop_handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioTimers:
    """TimerPort backed by the asyncio event loop."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def schedule(self, delay_ms: int, callback: TimerCallback) -> ScheduledTimer:
        loop = asyncio.get_running_loop()
        handle = ScheduledTimer(due_ms=delay_ms, callback=callback)

        def fire() -> None:
            if handle.cancelled:
                return
            handle.fired = True
            result = callback()
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._on_task_done)

        handle._loop_handle = loop.call_later(delay_ms / 1000.0, fire)
        return handle

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Timer callback failed", exc_info=exc)

    @property
    def in_flight(self) -> int:
        """Number of coroutine callbacks still running."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every coroutine callback that has already fired."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class ManualTimers:
    """Deterministic TimerPort; call ``await advance(ms)`` to move time."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: list[tuple[int, int, ScheduledTimer]] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: int, callback: TimerCallback) -> ScheduledTimer:
        handle = ScheduledTimer(due_ms=self.now_ms + delay_ms, callback=callback)
        self._timers.append((handle.due_ms, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        """Timers neither fired nor cancelled."""
        return sum(1 for _, _, h in self._timers if not h.fired and not h.cancelled)

    async def advance(self, ms: int) -> None:
        """Advance time, firing due callbacks in order (including new ones)."""
        target = self.now_ms + ms
        while True:
            due = [
                entry
                for entry in self._timers
                if entry[0] <= target and not entry[2].fired and not entry[2].cancelled
            ]
            if not due:
                break
            due_ms, _, handle = min(due, key=lambda e: (e[0], e[1]))
            self.now_ms = due_ms
            handle.fired = True
            result = handle.callback()
            if inspect.isawaitable(result):
                await result
        self.now_ms = target
        self._timers = [e for e in self._timers if not e[2].fired and not e[2].cancelled]
