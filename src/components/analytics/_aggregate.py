"""
Daily bucketing and rate math for the dashboard.

Pure functions only; the component feeds them event timestamps read from
the store.

Key behaviors:
- Rolling window of N calendar days (UTC) ending today, oldest first,
  covering [now - (N-1)d, now]
- Events outside the window are dropped from the buckets
- Half-up rounding for the per-day average and the one-decimal rates
- Rates are 0 when there are no views
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from src.core.entities import DailyBucket

from .models import AnalyticsValidationError, CumulativePoint

BucketField = Literal["views", "likes", "connections"]

MAX_WINDOW_DAYS = 365


def utc_day(timestamp: datetime) -> str:
    """Calendar day (YYYY-MM-DD) of a timestamp in UTC."""
    if timestamp.tzinfo is None:
        ts = timestamp.replace(tzinfo=UTC)
    else:
        ts = timestamp.astimezone(UTC)
    return ts.date().isoformat()


def validate_window(window_days: int) -> list[AnalyticsValidationError]:
    """Window must be between 1 and MAX_WINDOW_DAYS days."""
    if not isinstance(window_days, int) or isinstance(window_days, bool):
        return [
            AnalyticsValidationError(
                code="INVALID_WINDOW",
                message="window_days must be an integer",
                field_name="window_days",
            )
        ]
    if window_days < 1 or window_days > MAX_WINDOW_DAYS:
        return [
            AnalyticsValidationError(
                code="INVALID_WINDOW",
                message=f"window_days must be between 1 and {MAX_WINDOW_DAYS}",
                field_name="window_days",
            )
        ]
    return []


def build_window(now: datetime, window_days: int) -> list[DailyBucket]:
    """
    Zero-filled buckets, one per calendar day, oldest to newest.

    The last bucket is the UTC day of ``now``.
    """
    return [
        DailyBucket(date=utc_day(now - timedelta(days=offset)))
        for offset in range(window_days - 1, -1, -1)
    ]


def fill_buckets(
    buckets: list[DailyBucket],
    timestamps: Iterable[datetime],
    field: BucketField,
) -> int:
    """
    Count each timestamp into the bucket for its UTC day.

    Returns:
        Number of timestamps that landed inside the window.
    """
    by_date = {bucket.date: bucket for bucket in buckets}
    counted = 0
    for ts in timestamps:
        bucket = by_date.get(utc_day(ts))
        if bucket is None:
            continue
        setattr(bucket, field, getattr(bucket, field) + 1)
        counted += 1
    return counted


def cumulative_series(buckets: list[DailyBucket]) -> list[CumulativePoint]:
    """Running sum of connections across the window; never decreases."""
    running = 0
    series: list[CumulativePoint] = []
    for bucket in buckets:
        running += bucket.connections
        series.append(
            CumulativePoint(date=bucket.date, count=bucket.connections, cumulative=running)
        )
    return series


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return math.floor(value + 0.5)


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def avg_per_day(window_views: int, window_days: int) -> int:
    if window_days <= 0:
        return 0
    return round_half_up(window_views / window_days)


def engagement_rate(total_likes: int, total_views: int) -> float:
    """(likes + views) / views as a percentage; 0 with no views."""
    if total_views <= 0:
        return 0.0
    return round1((total_likes + total_views) / total_views * 100)


def connection_rate(total_connections: int, total_views: int) -> float:
    """connections / views as a percentage; 0 with no views."""
    if total_views <= 0:
        return 0.0
    return round1(total_connections / total_views * 100)


def merge_connections(
    buckets: list[DailyBucket],
    connection_buckets: list[DailyBucket],
) -> list[DailyBucket]:
    """Copy connection counts into the view/like buckets by date."""
    counts = {bucket.date: bucket.connections for bucket in connection_buckets}
    return [
        DailyBucket(
            date=bucket.date,
            views=bucket.views,
            likes=bucket.likes,
            connections=counts.get(bucket.date, 0),
        )
        for bucket in buckets
    ]
