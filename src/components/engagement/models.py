"""
Engagement component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --- Validation Error ---


@dataclass(frozen=True)
class EngagementValidationError:
    """Engagement validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class RecordViewInput:
    """Input for recording a dwell-gated view."""

    video_id: str
    viewer_id: str


@dataclass(frozen=True)
class ToggleLikeInput:
    """Input for toggling a like."""

    video_id: str
    viewer_id: str


@dataclass(frozen=True)
class CheckLikedInput:
    """Input for checking like state."""

    video_id: str
    viewer_id: str


# --- Output Models ---


@dataclass(frozen=True)
class RecordViewOutput:
    """
    Output from view recording.

    ``recorded`` is False when the append failed; the failure has already
    been logged and is never raised.
    """

    recorded: bool
    event_id: str | None = None
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LikeToggleResult:
    """Like state after a toggle plus the cached counter value."""

    liked: bool
    likes: int
