"""
Tests for the analytics component: dashboard, per-owner analytics,
connection analytics and recently viewed videos.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.adapters.memory_store import InMemoryEventStore
from src.components.analytics import (
    ConnectionAnalyticsInput,
    DashboardInput,
    RecentlyViewedInput,
    VideoAnalyticsInput,
    run,
    run_connection_analytics,
    run_dashboard,
    run_recently_viewed,
    run_video_analytics,
)
from src.core.entities import CONNECTIONS, LIKES, USERS, VIDEOS, VIEWS, VideoAsset
from src.core.errors import NetworkError, ValidationError
from src.core.ports.store import CompositeIndex, Document, FieldFilter, OrderBy

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 1, 14, 12, 0, tzinfo=UTC)
LONG_AGO = datetime(2025, 6, 1, 8, 0, tzinfo=UTC)


class BrokenStore(InMemoryEventStore):
    """Every query fails."""

    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        raise NetworkError("query", "backend offline")


def seed_video(store: InMemoryEventStore, video_id: str, owner: str, **extra: Any) -> None:
    video = VideoAsset(id=video_id, owner_id=owner, created_at=LONG_AGO, **extra)
    store.seed(VIDEOS, video_id, video.to_record())


def seed_views(
    store: InMemoryEventStore, video_id: str, at: datetime | None, count: int, viewer: str = "x"
) -> None:
    for i in range(count):
        store.seed(
            VIEWS,
            f"view-{video_id}-{viewer}-{at}-{i}",
            {"videoId": video_id, "viewerId": viewer, "viewedAt": at},
        )


def seed_likes(store: InMemoryEventStore, video_id: str, at: datetime, count: int) -> None:
    for i in range(count):
        store.seed(
            LIKES,
            f"{video_id}_liker{at.isoformat()}{i}",
            {"videoId": video_id, "userId": f"liker{i}", "createdAt": at},
        )


def seed_connection(
    store: InMemoryEventStore, key: str, participants: list[str], status: str, at: datetime
) -> None:
    store.seed(
        CONNECTIONS,
        key,
        {"participants": participants, "status": status, "createdAt": at},
    )


@pytest.fixture
def indexed_store() -> InMemoryEventStore:
    return InMemoryEventStore(
        indexes=[
            CompositeIndex(VIEWS, ("videoId", "viewedAt")),
            CompositeIndex(LIKES, ("videoId", "createdAt")),
        ]
    )


class TestDashboard:
    """Combined dashboard."""

    async def test_totals_are_all_time_and_rates_use_totals(
        self, indexed_store: InMemoryEventStore, clock: Any
    ) -> None:
        store = indexed_store
        seed_video(store, "v1", "owner")
        seed_video(store, "v2", "owner")
        seed_video(store, "other", "someone-else")
        seed_views(store, "v1", LONG_AGO, 100)
        seed_views(store, "v2", NOW, 20)
        seed_views(store, "other", NOW, 7)
        seed_likes(store, "v1", NOW - timedelta(days=1), 40)

        out = await run_dashboard(DashboardInput("owner", window_days=30), store=store, time_port=clock)

        assert out.success
        s = out.summary
        assert (s.total_views, s.total_likes, s.total_videos) == (120, 40, 2)
        assert (s.window_views, s.window_likes) == (20, 40)
        assert s.engagement_rate == 133.3
        assert s.avg_per_day == 1
        assert len(out.daily) == 30
        assert out.daily[-1].date == "2026-01-14"
        assert out.daily[-1].views == 20
        assert out.daily[-2].likes == 40

    async def test_no_views_means_zero_rates(self, store: InMemoryEventStore, clock: Any) -> None:
        seed_video(store, "v1", "owner")

        out = await run_dashboard(DashboardInput("owner"), store=store, time_port=clock)

        assert out.success
        assert out.summary.engagement_rate == 0
        assert out.summary.connection_rate == 0
        assert all(b.views == 0 for b in out.daily)

    async def test_connections_counted_into_daily_and_cumulative(
        self, indexed_store: InMemoryEventStore, clock: Any
    ) -> None:
        store = indexed_store
        seed_video(store, "v1", "owner")
        seed_views(store, "v1", NOW, 40)
        seed_connection(store, "c1", ["owner", "a"], "accepted", NOW - timedelta(days=2))
        seed_connection(store, "c2", ["b", "owner"], "accepted", NOW)
        seed_connection(store, "c3", ["owner", "c"], "pending", NOW)
        seed_connection(store, "c4", ["x", "y"], "accepted", NOW)
        seed_connection(store, "c5", ["owner", "d"], "accepted", LONG_AGO)

        out = await run_dashboard(DashboardInput("owner", window_days=7), store=store, time_port=clock)

        assert out.summary.total_connections == 3
        assert out.summary.window_connections == 2
        assert out.summary.connection_rate == 7.5
        assert [b.connections for b in out.daily] == [0, 0, 0, 0, 1, 0, 1]
        assert [p.cumulative for p in out.cumulative_connections] == [0, 0, 0, 0, 1, 1, 2]
        assert [c.id for c in out.recent_connections] == ["c2", "c1", "c5"]

    async def test_missing_index_falls_back_and_logs_hint(
        self, store: InMemoryEventStore, clock: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        seed_video(store, "v1", "owner")
        seed_views(store, "v1", NOW - timedelta(hours=3), 1, viewer="early")
        seed_views(store, "v1", NOW - timedelta(hours=1), 1, viewer="late")

        with caplog.at_level(logging.WARNING, logger="src.components.analytics.component"):
            out = await run_dashboard(DashboardInput("owner"), store=store, time_port=clock)

        assert out.success
        assert out.summary.total_views == 2
        assert [v.viewer_id for v in out.recent_views] == ["late", "early"]
        assert "Create a composite index on 'videoViews'" in caplog.text

    async def test_declared_index_avoids_fallback(
        self,
        indexed_store: InMemoryEventStore,
        clock: Any,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        seed_video(indexed_store, "v1", "owner")
        seed_views(indexed_store, "v1", NOW, 1)

        with caplog.at_level(logging.WARNING):
            await run_dashboard(DashboardInput("owner"), store=indexed_store, time_port=clock)

        assert "composite index" not in caplog.text

    async def test_store_failure_degrades_to_zeroed(
        self, clock: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            out = await run_dashboard(
                DashboardInput("owner", window_days=7), store=BrokenStore(), time_port=clock
            )

        assert not out.success
        assert out.errors[0].code == "AGGREGATION_FAILED"
        assert "backend offline" in out.errors[0].message
        assert out.summary.total_views == 0
        assert len(out.daily) == 7
        assert all(b.views == 0 and b.likes == 0 for b in out.daily)
        assert "Dashboard aggregation failed" in caplog.text

    async def test_invalid_window(self, store: InMemoryEventStore, clock: Any) -> None:
        out = await run_dashboard(DashboardInput("owner", window_days=0), store=store, time_port=clock)

        assert not out.success
        assert out.errors[0].code == "INVALID_WINDOW"
        assert out.daily == []

    async def test_blank_user(self, store: InMemoryEventStore, clock: Any) -> None:
        out = await run_dashboard(DashboardInput(""), store=store, time_port=clock)

        assert not out.success
        assert out.errors[0].code == "INVALID_USER_ID"
        assert len(out.daily) == 30


class TestVideoAnalytics:
    async def test_recent_lists_limited_and_newest_first(
        self, indexed_store: InMemoryEventStore, clock: Any
    ) -> None:
        seed_video(indexed_store, "v1", "owner")
        for hours in range(15):
            seed_views(indexed_store, "v1", NOW - timedelta(hours=hours), 1, viewer=f"u{hours}")

        out = await run_video_analytics(
            VideoAnalyticsInput("owner", recent_limit=10), store=indexed_store, time_port=clock
        )

        assert len(out.recent_views) == 10
        assert out.recent_views[0].viewer_id == "u0"
        assert out.recent_views[-1].viewer_id == "u9"

    async def test_missing_timestamp_counts_as_now(
        self, indexed_store: InMemoryEventStore, clock: Any
    ) -> None:
        seed_video(indexed_store, "v1", "owner")
        seed_views(indexed_store, "v1", None, 1)

        out = await run_video_analytics(
            VideoAnalyticsInput("owner", window_days=7), store=indexed_store, time_port=clock
        )

        assert out.daily[-1].views == 1

    async def test_invalid_window_raises(self, store: InMemoryEventStore) -> None:
        with pytest.raises(ValidationError):
            await run_video_analytics(VideoAnalyticsInput("owner", window_days=400), store=store)

    async def test_store_errors_propagate(self) -> None:
        with pytest.raises(NetworkError):
            await run_connection_analytics(ConnectionAnalyticsInput("owner"), store=BrokenStore())


class TestRecentlyViewed:
    async def test_unique_newest_first_skipping_deleted(
        self, store: InMemoryEventStore, clock: Any
    ) -> None:
        seed_video(store, "v1", "alice", title="First")
        seed_video(store, "v2", "bob", title="Second")
        seed_video(store, "v3", "alice", status="deleted")
        store.seed(USERS, "alice", {"displayName": "Alice", "userType": "startup"})

        seed_views(store, "v1", NOW - timedelta(hours=5), 1, viewer="me")
        seed_views(store, "v2", NOW - timedelta(hours=3), 1, viewer="me")
        seed_views(store, "v3", NOW - timedelta(hours=2), 1, viewer="me")
        seed_views(store, "v1", NOW - timedelta(hours=1), 1, viewer="me")
        seed_views(store, "v2", NOW, 1, viewer="someone-else")

        out = await run_recently_viewed(RecentlyViewedInput("me"), store=store, time_port=clock)

        assert [item.video.id for item in out.items] == ["v1", "v2"]
        assert out.items[0].owner.display_name == "Alice"
        assert out.items[0].owner.user_type == "startup"
        # bob has no profile record
        assert out.items[1].owner.display_name == "Unknown"

    async def test_limit_applies_to_views(self, store: InMemoryEventStore, clock: Any) -> None:
        for i in range(5):
            seed_video(store, f"v{i}", "alice")
            seed_views(store, f"v{i}", NOW - timedelta(hours=i), 1, viewer="me")

        out = await run(RecentlyViewedInput("me", limit=2), store=store, time_port=clock)

        assert [item.video.id for item in out.items] == ["v0", "v1"]  # type: ignore[union-attr]
