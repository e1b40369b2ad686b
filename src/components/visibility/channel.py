"""
Intersection message channel.

The viewport pushes IntersectionEntry messages; the visibility monitor
consumes them in order until the channel is closed.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import cast

from .models import IntersectionEntry

_CLOSED = object()


class ChannelClosedError(RuntimeError):
    """Publish after close."""


class IntersectionChannel:
    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, entry: IntersectionEntry) -> None:
        if self._closed:
            raise ChannelClosedError("Intersection channel is closed")
        self._queue.put_nowait(entry)

    def close(self) -> None:
        """Stop consumers once already queued entries are drained."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[IntersectionEntry]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[IntersectionEntry]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                # Leave the marker for any other consumer.
                self._queue.put_nowait(_CLOSED)
                return
            yield cast(IntersectionEntry, item)
