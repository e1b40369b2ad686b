"""
Domain entities for the pitch feed engagement pipeline.

- VideoAsset: pitch video with denormalized view/like counters
- ViewEvent: append-only dwell-gated view record
- LikeEvent: one live record per (video, viewer) pair
- MatchDecision: classified swipe outcome
- DailyBucket: derived, never-persisted daily aggregate
- ProfileSnapshot: role-specific user snapshot sent with connect requests

Store records are plain dicts; the ``to_record``/``from_record`` helpers
translate at the store boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

# --- Collection names ---

VIDEOS = "pitchVideos"
VIEWS = "videoViews"
LIKES = "videoLikes"
CONNECTIONS = "connections"
USERS = "users"

SwipeDirection = Literal["connect", "pass"]
UserType = Literal["individual", "startup", "investor"]
VideoStatus = Literal["active", "deleted"]


def like_key(video_id: str, viewer_id: str) -> str:
    """Deterministic LikeEvent key; one live record per pair."""
    return f"{video_id}_{viewer_id}"


def _as_utc(value: Any) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, str):
        return _as_utc(datetime.fromisoformat(value))
    raise TypeError(f"Unsupported timestamp value: {value!r}")


def record_timestamp(value: Any, fallback: datetime) -> datetime:
    """Stored timestamp as aware UTC; an unresolved server timestamp reads as ``fallback``."""
    if isinstance(value, (datetime, str)):
        return _as_utc(value)
    return fallback


# --- VideoAsset ---


@dataclass
class VideoAsset:
    """
    Pitch video.

    ``views`` and ``likes`` are caches for fast display; the raw event
    collections are the source of truth.
    """

    id: str
    owner_id: str
    created_at: datetime
    title: str = "Untitled Video"
    category: str = "other"
    status: VideoStatus = "active"
    views: int = 0
    likes: int = 0

    def to_record(self) -> dict[str, Any]:
        return {
            "userId": self.owner_id,
            "title": self.title,
            "category": self.category,
            "status": self.status,
            "views": self.views,
            "likes": self.likes,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, video_id: str, record: dict[str, Any]) -> VideoAsset:
        return cls(
            id=video_id,
            owner_id=record["userId"],
            created_at=_as_utc(record["createdAt"]),
            title=record.get("title") or "Untitled Video",
            category=record.get("category") or "other",
            status=record.get("status", "active"),
            views=int(record.get("views") or 0),
            likes=int(record.get("likes") or 0),
        )


# --- Raw events ---


@dataclass(frozen=True)
class ViewEvent:
    """Immutable view record. Duplicates per (video, viewer) are valid."""

    video_id: str
    viewer_id: str
    viewed_at: datetime

    def to_record(self) -> dict[str, Any]:
        return {
            "videoId": self.video_id,
            "viewerId": self.viewer_id,
            "viewedAt": self.viewed_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any], now: datetime) -> ViewEvent:
        return cls(
            video_id=record["videoId"],
            viewer_id=record["viewerId"],
            viewed_at=record_timestamp(record.get("viewedAt"), now),
        )


@dataclass(frozen=True)
class LikeEvent:
    """Like record, keyed by ``like_key(video_id, viewer_id)``."""

    video_id: str
    viewer_id: str
    created_at: datetime

    @property
    def key(self) -> str:
        return like_key(self.video_id, self.viewer_id)

    def to_record(self) -> dict[str, Any]:
        return {
            "videoId": self.video_id,
            "userId": self.viewer_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any], now: datetime) -> LikeEvent:
        return cls(
            video_id=record["videoId"],
            viewer_id=record["userId"],
            created_at=record_timestamp(record.get("createdAt"), now),
        )


@dataclass(frozen=True)
class ConnectionRecord:
    """Connection written by the connection service (read-only here)."""

    id: str
    participants: tuple[str, ...]
    status: str
    created_at: datetime

    @classmethod
    def from_record(
        cls, connection_id: str, record: dict[str, Any], now: datetime
    ) -> ConnectionRecord:
        return cls(
            id=connection_id,
            participants=tuple(record.get("participants") or ()),
            status=record.get("status", "pending"),
            created_at=record_timestamp(record.get("createdAt"), now),
        )


# --- Decisions ---


@dataclass(frozen=True)
class MatchDecision:
    """Swipe decision. Only ``connect`` leaves the process."""

    from_user: str
    to_user: str
    direction: SwipeDirection
    timestamp: datetime


# --- Derived aggregates ---


@dataclass
class DailyBucket:
    """Per-day aggregate, derived per query."""

    date: str  # YYYY-MM-DD (UTC)
    views: int = 0
    likes: int = 0
    connections: int = 0


# --- Profiles ---


@dataclass(frozen=True)
class ProfileSnapshot:
    """Role-specific profile snapshot attached to connect requests."""

    user_id: str
    user_type: UserType = "individual"
    display_name: str = "Unknown"
    photo_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, user_id: str, record: dict[str, Any]) -> ProfileSnapshot:
        known = {"userType", "displayName", "photoURL"}
        return cls(
            user_id=user_id,
            user_type=record.get("userType") or "individual",
            display_name=record.get("displayName") or "Unknown",
            photo_url=record.get("photoURL"),
            extra={k: v for k, v in record.items() if k not in known},
        )
