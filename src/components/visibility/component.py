"""
Visibility component - Viewport-driven autoplay and dwell-gated views.

Invariants:
- An element at or above the threshold plays; below it pauses
- A view is recorded after dwell_ms of continuous visibility, at most once
  per (video_id, session_id) for the lifetime of the monitor
- Leaving the viewport cancels a pending dwell with no side effects
- Re-binding an observed element to another video cancels its pending dwell
- The recorded set is updated before the recorder is awaited, so a
  re-entry during a slow write cannot double-record
- close() cancels every dwell timer
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from src.core.ports.time import TimerHandle

from .channel import IntersectionChannel
from .models import FeedElement, IntersectionEntry, PlayState, VisibilityConfig
from .mute import MutePolicy
from .ports import PlayerPort, TimerPort, ViewRecorderPort

logger = logging.getLogger(__name__)


class VisibilityMonitor:
    """Per-session autoplay controller for one viewer."""

    def __init__(
        self,
        viewer_id: str,
        session_id: str,
        *,
        recorder: ViewRecorderPort,
        player: PlayerPort,
        timers: TimerPort,
        mute: MutePolicy,
        config: VisibilityConfig | None = None,
    ) -> None:
        self._viewer_id = viewer_id
        self._session_id = session_id
        self._recorder = recorder
        self._player = player
        self._timers = timers
        self._mute = mute
        self._config = config or VisibilityConfig()

        self._elements: dict[str, FeedElement] = {}
        self._play_state: dict[str, PlayState] = {}
        self._dwell_timers: dict[str, TimerHandle] = {}
        self._recorded: set[tuple[str, str]] = set()
        self._closed = False

    # --- Introspection ---

    def play_state(self, element_id: str) -> PlayState:
        return self._play_state.get(element_id, PlayState.PAUSED)

    def has_pending_dwell(self, element_id: str) -> bool:
        return element_id in self._dwell_timers

    def was_recorded(self, video_id: str) -> bool:
        return (video_id, self._session_id) in self._recorded

    @property
    def observed(self) -> list[str]:
        return list(self._elements)

    # --- Observation ---

    def observe(self, elements: Iterable[FeedElement]) -> None:
        """Replace the observed element set."""
        incoming = {element.element_id: element for element in elements}
        for element_id, current in list(self._elements.items()):
            # Removed, or the same slot now shows another video
            if incoming.get(element_id) != current:
                self._cancel_dwell(element_id)
                self._play_state.pop(element_id, None)
        self._elements = incoming
        logger.debug("Observing %d feed elements", len(incoming))

    def handle(self, entry: IntersectionEntry) -> None:
        """Apply one intersection change."""
        if self._closed:
            return
        element = self._elements.get(entry.element_id)
        if element is None:
            logger.debug("Ignoring intersection for unobserved element %s", entry.element_id)
            return

        if entry.ratio >= self._config.threshold:
            self._enter(element)
        else:
            self._leave(element)

    async def run(self, channel: IntersectionChannel) -> None:
        """Consume intersection entries until the channel closes."""
        async for entry in channel:
            self.handle(entry)

    def close(self) -> None:
        """Cancel every pending dwell timer."""
        self._closed = True
        for element_id in list(self._dwell_timers):
            self._cancel_dwell(element_id)

    # --- Transitions ---

    def _enter(self, element: FeedElement) -> None:
        try:
            self._player.play(element.element_id, muted=self._mute.muted)
        except Exception as e:
            logger.info("Autoplay prevented for %s: %s", element.element_id, e)
        self._play_state[element.element_id] = PlayState.PLAYING

        if self.was_recorded(element.video_id) or element.element_id in self._dwell_timers:
            return

        self._dwell_timers[element.element_id] = self._timers.schedule(
            self._config.dwell_ms,
            lambda: self._on_dwell(element),
        )

    def _leave(self, element: FeedElement) -> None:
        try:
            self._player.pause(element.element_id)
        except Exception as e:
            logger.info("Pause failed for %s: %s", element.element_id, e)
        self._play_state[element.element_id] = PlayState.PAUSED
        self._cancel_dwell(element.element_id)

    def _cancel_dwell(self, element_id: str) -> None:
        handle = self._dwell_timers.pop(element_id, None)
        if handle is not None:
            handle.cancel()

    async def _on_dwell(self, element: FeedElement) -> None:
        self._dwell_timers.pop(element.element_id, None)
        if self._elements.get(element.element_id) != element:
            logger.debug("Dwell for %s fired after it left the feed", element.video_id)
            return
        key = (element.video_id, self._session_id)
        if key in self._recorded:
            return
        self._recorded.add(key)
        logger.debug("Dwell reached for %s, recording view", element.video_id)
        await self._recorder.record_view(element.video_id, self._viewer_id)
