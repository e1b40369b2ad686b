"""
Analytics component - Rolling daily engagement buckets for the dashboard.
"""

from ._aggregate import (
    MAX_WINDOW_DAYS,
    avg_per_day,
    build_window,
    connection_rate,
    cumulative_series,
    engagement_rate,
    fill_buckets,
    merge_connections,
    round1,
    round_half_up,
    utc_day,
    validate_window,
)
from .component import (
    run,
    run_connection_analytics,
    run_dashboard,
    run_recently_viewed,
    run_video_analytics,
)
from .models import (
    AnalyticsValidationError,
    ConnectionAnalyticsInput,
    ConnectionAnalyticsOutput,
    CumulativePoint,
    DashboardInput,
    DashboardOutput,
    DashboardSummary,
    RecentlyViewedInput,
    RecentlyViewedItem,
    RecentlyViewedOutput,
    VideoAnalyticsInput,
    VideoAnalyticsOutput,
)
from .ports import EventStorePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_video_analytics",
    "run_connection_analytics",
    "run_dashboard",
    "run_recently_viewed",
    # Pure functions
    "MAX_WINDOW_DAYS",
    "utc_day",
    "validate_window",
    "build_window",
    "fill_buckets",
    "cumulative_series",
    "merge_connections",
    "round_half_up",
    "round1",
    "avg_per_day",
    "engagement_rate",
    "connection_rate",
    # Input models
    "VideoAnalyticsInput",
    "ConnectionAnalyticsInput",
    "DashboardInput",
    "RecentlyViewedInput",
    # Output models
    "AnalyticsValidationError",
    "CumulativePoint",
    "VideoAnalyticsOutput",
    "ConnectionAnalyticsOutput",
    "DashboardSummary",
    "DashboardOutput",
    "RecentlyViewedItem",
    "RecentlyViewedOutput",
    # Ports
    "EventStorePort",
    "TimePort",
]
