"""
Analytics component - Dashboard aggregation over raw engagement events.

Reads raw view/like/connection records on demand and derives rolling daily
buckets. Nothing here is persisted.

Invariants:
- The daily series always has exactly ``window_days`` entries, zero-filled,
  oldest to newest
- Totals are all-time counts of raw events; buckets only count events
  inside the window
- The cumulative connection series never decreases
- A missing composite index degrades to an unordered query sorted in memory
- The dashboard never raises; failures produce zeroed metrics with errors
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from src.core.entities import (
    CONNECTIONS,
    LIKES,
    USERS,
    VIDEOS,
    VIEWS,
    ConnectionRecord,
    LikeEvent,
    ProfileSnapshot,
    VideoAsset,
    ViewEvent,
    record_timestamp,
)
from src.core.errors import IndexRequiredError, ValidationError
from src.core.ports.store import DocRef, Document, FieldFilter, OrderBy

from ._aggregate import (
    avg_per_day,
    build_window,
    connection_rate,
    cumulative_series,
    engagement_rate,
    fill_buckets,
    merge_connections,
    validate_window,
)
from .models import (
    AnalyticsValidationError,
    ConnectionAnalyticsInput,
    ConnectionAnalyticsOutput,
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

logger = logging.getLogger(__name__)


def _now(time_port: TimePort | None) -> datetime:
    if time_port:
        return time_port.now_utc()
    return datetime.now(UTC)


def _raise_if_invalid_window(window_days: int) -> None:
    errors = validate_window(window_days)
    if errors:
        raise ValidationError("window_days", errors[0].message)


async def _events_for_video(
    store: EventStorePort,
    collection: str,
    video_id: str,
    time_field: str,
    now: datetime,
) -> list[Document]:
    """Newest-first events for one video."""
    filters = [FieldFilter("videoId", "==", video_id)]
    try:
        return await store.query(
            collection, filters, order_by=OrderBy(time_field, descending=True)
        )
    except IndexRequiredError as e:
        logger.warning(
            "Ordered query on %s failed, sorting in memory instead. %s", collection, e.hint
        )
        docs = await store.query(collection, filters)
        return sorted(
            docs, key=lambda d: record_timestamp(d.data.get(time_field), now), reverse=True
        )


def _newest_first(events: list[Any], key: str) -> list[Any]:
    return sorted(events, key=lambda e: getattr(e, key), reverse=True)


# --- Component Entry Points ---


async def run_video_analytics(
    inp: VideoAnalyticsInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> VideoAnalyticsOutput:
    """
    Views and likes across every video the user owns.

    Raises:
        ValidationError: window out of range
        Any store error, unchanged
    """
    _raise_if_invalid_window(inp.window_days)
    now = _now(time_port)

    videos = await store.query(VIDEOS, [FieldFilter("userId", "==", inp.user_id)])
    video_ids = [doc.key for doc in videos]

    like_docs, view_docs = await asyncio.gather(
        asyncio.gather(
            *(_events_for_video(store, LIKES, vid, "createdAt", now) for vid in video_ids)
        ),
        asyncio.gather(
            *(_events_for_video(store, VIEWS, vid, "viewedAt", now) for vid in video_ids)
        ),
    )

    likes = [LikeEvent.from_record(doc.data, now) for docs in like_docs for doc in docs]
    views = [ViewEvent.from_record(doc.data, now) for docs in view_docs for doc in docs]

    daily = build_window(now, inp.window_days)
    window_likes = fill_buckets(daily, (like.created_at for like in likes), "likes")
    window_views = fill_buckets(daily, (view.viewed_at for view in views), "views")

    logger.debug(
        "Video analytics for %s: %d videos, %d views, %d likes",
        inp.user_id,
        len(video_ids),
        len(views),
        len(likes),
    )

    return VideoAnalyticsOutput(
        total_views=len(views),
        total_likes=len(likes),
        total_videos=len(video_ids),
        window_views=window_views,
        window_likes=window_likes,
        daily=daily,
        recent_likes=_newest_first(likes, "created_at")[: inp.recent_limit],
        recent_views=_newest_first(views, "viewed_at")[: inp.recent_limit],
    )


async def run_connection_analytics(
    inp: ConnectionAnalyticsInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> ConnectionAnalyticsOutput:
    """
    Accepted connections the user participates in.

    Raises:
        ValidationError: window out of range
        Any store error, unchanged
    """
    _raise_if_invalid_window(inp.window_days)
    now = _now(time_port)

    docs = await store.query(
        CONNECTIONS,
        [
            FieldFilter("participants", "array_contains", inp.user_id),
            FieldFilter("status", "==", "accepted"),
        ],
    )
    connections = sorted(
        (ConnectionRecord.from_record(doc.key, doc.data, now) for doc in docs),
        key=lambda c: c.created_at,
    )

    daily = build_window(now, inp.window_days)
    window_connections = fill_buckets(
        daily, (conn.created_at for conn in connections), "connections"
    )

    return ConnectionAnalyticsOutput(
        total_connections=len(connections),
        window_connections=window_connections,
        daily=daily,
        cumulative=cumulative_series(daily),
        recent_connections=_newest_first(connections, "created_at")[: inp.recent_limit],
    )


def _zeroed_dashboard(
    inp: DashboardInput,
    now: datetime,
    errors: list[AnalyticsValidationError],
) -> DashboardOutput:
    daily = build_window(now, inp.window_days) if not validate_window(inp.window_days) else []
    return DashboardOutput(
        user_id=inp.user_id,
        window_days=inp.window_days,
        daily=daily,
        cumulative_connections=cumulative_series(daily),
        errors=errors,
        success=False,
    )


async def run_dashboard(
    inp: DashboardInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> DashboardOutput:
    """
    Combined video and connection analytics for the dashboard.

    Never raises: validation problems and store failures come back as a
    zeroed dashboard with ``success=False``.
    """
    now = _now(time_port)

    errors = validate_window(inp.window_days)
    if not inp.user_id or not inp.user_id.strip():
        errors.append(
            AnalyticsValidationError(
                code="INVALID_USER_ID",
                message="User id is required",
                field_name="user_id",
            )
        )
    if errors:
        return _zeroed_dashboard(inp, now, errors)

    try:
        videos, connections = await asyncio.gather(
            run_video_analytics(
                VideoAnalyticsInput(inp.user_id, inp.window_days, inp.recent_limit),
                store=store,
                time_port=time_port,
            ),
            run_connection_analytics(
                ConnectionAnalyticsInput(inp.user_id, inp.window_days, inp.recent_limit),
                store=store,
                time_port=time_port,
            ),
        )
    except Exception as e:
        logger.warning("Dashboard aggregation failed for %s", inp.user_id, exc_info=True)
        return _zeroed_dashboard(
            inp,
            now,
            [AnalyticsValidationError(code="AGGREGATION_FAILED", message=str(e))],
        )

    summary = DashboardSummary(
        total_views=videos.total_views,
        total_likes=videos.total_likes,
        total_videos=videos.total_videos,
        total_connections=connections.total_connections,
        window_views=videos.window_views,
        window_likes=videos.window_likes,
        window_connections=connections.window_connections,
        avg_per_day=avg_per_day(videos.window_views, inp.window_days),
        engagement_rate=engagement_rate(videos.total_likes, videos.total_views),
        connection_rate=connection_rate(connections.total_connections, videos.total_views),
    )

    return DashboardOutput(
        user_id=inp.user_id,
        window_days=inp.window_days,
        summary=summary,
        daily=merge_connections(videos.daily, connections.daily),
        cumulative_connections=connections.cumulative,
        recent_likes=videos.recent_likes,
        recent_views=videos.recent_views,
        recent_connections=connections.recent_connections,
    )


async def run_recently_viewed(
    inp: RecentlyViewedInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> RecentlyViewedOutput:
    """
    Videos the viewer watched most recently, unique, newest first.

    Deleted or missing videos are skipped; a missing owner profile falls back
    to defaults.
    """
    now = _now(time_port)

    docs = await store.query(VIEWS, [FieldFilter("viewerId", "==", inp.viewer_id)])
    docs.sort(key=lambda d: record_timestamp(d.data.get("viewedAt"), now), reverse=True)

    video_ids: list[str] = []
    for doc in docs[: inp.limit]:
        video_id = doc.data.get("videoId")
        if video_id and video_id not in video_ids:
            video_ids.append(video_id)

    items: list[RecentlyViewedItem] = []
    for video_id in video_ids:
        record = await store.get(DocRef(VIDEOS, video_id))
        if record is None:
            continue
        video = VideoAsset.from_record(video_id, record)
        if video.status == "deleted":
            continue
        owner_record = await store.get(DocRef(USERS, video.owner_id))
        owner = ProfileSnapshot.from_record(video.owner_id, owner_record or {})
        items.append(RecentlyViewedItem(video=video, owner=owner))

    return RecentlyViewedOutput(items=items)


async def run(
    inp: VideoAnalyticsInput | ConnectionAnalyticsInput | DashboardInput | RecentlyViewedInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> (
    VideoAnalyticsOutput | ConnectionAnalyticsOutput | DashboardOutput | RecentlyViewedOutput
):
    """
    Main entry point for the analytics component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, VideoAnalyticsInput):
        return await run_video_analytics(inp, store=store, time_port=time_port)
    elif isinstance(inp, ConnectionAnalyticsInput):
        return await run_connection_analytics(inp, store=store, time_port=time_port)
    elif isinstance(inp, DashboardInput):
        return await run_dashboard(inp, store=store, time_port=time_port)
    elif isinstance(inp, RecentlyViewedInput):
        return await run_recently_viewed(inp, store=store, time_port=time_port)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
