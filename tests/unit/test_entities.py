"""
Entity record mapping tests.
"""

from datetime import UTC, datetime, timedelta, timezone

from src.core.entities import (
    ConnectionRecord,
    LikeEvent,
    VideoAsset,
    ViewEvent,
    like_key,
    record_timestamp,
)

NOW = datetime(2026, 1, 14, 12, 0, tzinfo=UTC)


class TestRecordTimestamp:
    def test_missing_reads_as_fallback(self) -> None:
        assert record_timestamp(None, NOW) == NOW

    def test_unresolved_sentinel_reads_as_fallback(self) -> None:
        assert record_timestamp(object(), NOW) == NOW

    def test_iso_string_parsed(self) -> None:
        assert record_timestamp("2026-01-10T08:00:00+00:00", NOW) == datetime(
            2026, 1, 10, 8, 0, tzinfo=UTC
        )

    def test_offset_converted_to_utc(self) -> None:
        local = datetime(2026, 1, 10, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert record_timestamp(local, NOW) == datetime(2026, 1, 11, 3, 0, tzinfo=UTC)


class TestFromRecord:
    def test_view_event(self) -> None:
        event = ViewEvent(video_id="v1", viewer_id="u1", viewed_at=NOW)
        assert ViewEvent.from_record(event.to_record(), NOW) == event

    def test_view_without_timestamp(self) -> None:
        event = ViewEvent.from_record({"videoId": "v1", "viewerId": "u1"}, NOW)
        assert event.viewed_at == NOW

    def test_like_event_key(self) -> None:
        like = LikeEvent.from_record(
            {"videoId": "v1", "userId": "u1", "createdAt": NOW - timedelta(days=1)}, NOW
        )
        assert like.key == like_key("v1", "u1") == "v1_u1"
        assert like.created_at == NOW - timedelta(days=1)

    def test_connection_record(self) -> None:
        conn = ConnectionRecord.from_record(
            "c1", {"participants": ["a", "b"], "status": "accepted"}, NOW
        )
        assert conn.participants == ("a", "b")
        assert conn.created_at == NOW

    def test_video_defaults(self) -> None:
        video = VideoAsset.from_record("v1", {"userId": "owner", "createdAt": NOW})
        assert video.title == "Untitled Video"
        assert video.status == "active"
        assert (video.views, video.likes) == (0, 0)
