"""
Visibility component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class IntersectionEntry:
    """Visible fraction of one feed element, as reported by the viewport."""

    element_id: str
    ratio: float


@dataclass(frozen=True)
class FeedElement:
    """A rendered feed slot bound to a video."""

    element_id: str
    video_id: str


@dataclass(frozen=True)
class VisibilityConfig:
    """Autoplay threshold and dwell gate."""

    threshold: float = 0.75
    dwell_ms: int = 3000

    def __post_init__(self) -> None:
        if not 0 < self.threshold <= 1:
            raise ValueError("threshold must be in (0, 1]")
        if self.dwell_ms < 0:
            raise ValueError("dwell_ms must not be negative")


class PlayState(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
