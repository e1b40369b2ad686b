"""
Visibility component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.components.engagement.ports import ViewRecorderPort
from src.core.ports.time import TimerPort
from src.ports.preferences import PreferenceStorePort

__all__ = [
    "PlayerPort",
    "PreferenceStorePort",
    "TimerPort",
    "ViewRecorderPort",
]


class PlayerPort(Protocol):
    """Media playback for feed elements."""

    def play(self, element_id: str, *, muted: bool) -> None:
        """Start playback. May raise if autoplay is refused."""
        ...

    def pause(self, element_id: str) -> None:
        ...
