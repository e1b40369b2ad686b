"""
Engagement component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.core.ports.store import EventStorePort
from src.core.ports.time import TimePort

from .models import LikeToggleResult, RecordViewOutput

__all__ = [
    "EventStorePort",
    "TimePort",
    "ViewRecorderPort",
    "LikeTogglePort",
]


class ViewRecorderPort(Protocol):
    """What the visibility monitor needs from the recorder."""

    async def record_view(self, video_id: str, viewer_id: str) -> RecordViewOutput:
        """Record a view; never raises."""
        ...


class LikeTogglePort(Protocol):
    """What the match dispatcher needs from the recorder."""

    async def toggle_like(self, video_id: str, viewer_id: str) -> LikeToggleResult:
        """Toggle like state; errors propagate."""
        ...
