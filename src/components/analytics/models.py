"""
Analytics component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.entities import (
    ConnectionRecord,
    DailyBucket,
    LikeEvent,
    ProfileSnapshot,
    VideoAsset,
    ViewEvent,
)

# --- Validation Error ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Series Points ---


@dataclass(frozen=True)
class CumulativePoint:
    """Connections on a day plus the running total up to that day."""

    date: str
    count: int
    cumulative: int


# --- Input Models ---


@dataclass(frozen=True)
class VideoAnalyticsInput:
    """Input for per-owner view/like analytics."""

    user_id: str
    window_days: int = 30
    recent_limit: int = 10


@dataclass(frozen=True)
class ConnectionAnalyticsInput:
    """Input for accepted-connection analytics."""

    user_id: str
    window_days: int = 30
    recent_limit: int = 10


@dataclass(frozen=True)
class DashboardInput:
    """Input for the combined dashboard."""

    user_id: str
    window_days: int = 30
    recent_limit: int = 10


@dataclass(frozen=True)
class RecentlyViewedInput:
    """Input for a viewer's recently viewed videos."""

    viewer_id: str
    limit: int = 10


# --- Output Models ---


@dataclass(frozen=True)
class VideoAnalyticsOutput:
    """
    View/like analytics for one owner.

    ``total_*`` are all-time counts of raw events; ``window_*`` only count
    events inside the daily buckets.
    """

    total_views: int
    total_likes: int
    total_videos: int
    window_views: int
    window_likes: int
    daily: list[DailyBucket] = field(default_factory=list)
    recent_likes: list[LikeEvent] = field(default_factory=list)
    recent_views: list[ViewEvent] = field(default_factory=list)


@dataclass(frozen=True)
class ConnectionAnalyticsOutput:
    """Accepted-connection analytics for one user."""

    total_connections: int
    window_connections: int
    daily: list[DailyBucket] = field(default_factory=list)
    cumulative: list[CumulativePoint] = field(default_factory=list)
    recent_connections: list[ConnectionRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardSummary:
    """Headline numbers shown on the dashboard cards."""

    total_views: int = 0
    total_likes: int = 0
    total_videos: int = 0
    total_connections: int = 0
    window_views: int = 0
    window_likes: int = 0
    window_connections: int = 0
    avg_per_day: int = 0
    engagement_rate: float = 0.0
    connection_rate: float = 0.0


@dataclass(frozen=True)
class DashboardOutput:
    """
    Combined dashboard.

    On failure every metric is zero, ``daily`` still holds the zero-filled
    window, and ``errors`` explains what went wrong.
    """

    user_id: str
    window_days: int
    summary: DashboardSummary = field(default_factory=DashboardSummary)
    daily: list[DailyBucket] = field(default_factory=list)
    cumulative_connections: list[CumulativePoint] = field(default_factory=list)
    recent_likes: list[LikeEvent] = field(default_factory=list)
    recent_views: list[ViewEvent] = field(default_factory=list)
    recent_connections: list[ConnectionRecord] = field(default_factory=list)
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RecentlyViewedItem:
    """A viewed video together with its owner's profile."""

    video: VideoAsset
    owner: ProfileSnapshot


@dataclass(frozen=True)
class RecentlyViewedOutput:
    """Unique videos, newest view first."""

    items: list[RecentlyViewedItem] = field(default_factory=list)
