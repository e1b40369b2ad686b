"""
Engagement component - View and like event recording.

Persists raw engagement records and keeps the cached like counter on the
video in step with the like records.

Invariants:
- ViewEvents are append-only; duplicates per (video, viewer) are valid
- At most one live LikeEvent per (video, viewer) pair
- View recording is telemetry: failures are logged, never raised or retried
- The cached like counter only moves when the like record itself changed
  (compare-and-set create/delete followed by an atomic increment)
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from src.core.entities import LIKES, VIDEOS, VIEWS, LikeEvent, ViewEvent, like_key
from src.core.errors import NotFoundError, ValidationError
from src.core.ports.store import DocRef

from .models import (
    CheckLikedInput,
    EngagementValidationError,
    LikeToggleResult,
    RecordViewInput,
    RecordViewOutput,
    ToggleLikeInput,
)
from .ports import EventStorePort, TimePort

logger = logging.getLogger(__name__)


# --- Pure Functions (Functional Core) ---


def validate_ids(video_id: str, viewer_id: str) -> list[EngagementValidationError]:
    """
    Validate the (video, viewer) pair.

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[EngagementValidationError] = []

    if not video_id or not video_id.strip():
        errors.append(
            EngagementValidationError(
                code="INVALID_VIDEO_ID",
                message="Video id is required",
                field_name="video_id",
            )
        )

    if not viewer_id or not viewer_id.strip():
        errors.append(
            EngagementValidationError(
                code="INVALID_VIEWER_ID",
                message="Viewer id is required",
                field_name="viewer_id",
            )
        )

    return errors


def _raise_if_invalid(video_id: str, viewer_id: str) -> None:
    errors = validate_ids(video_id, viewer_id)
    if errors:
        first = errors[0]
        raise ValidationError(first.field_name or "input", first.message)


# --- Recorder ---


class EventRecorder:
    """
    View/like event recorder.

    Satisfies both ViewRecorderPort (visibility monitor) and LikeTogglePort
    (match dispatcher).
    """

    def __init__(
        self,
        store: EventStorePort,
        time_port: TimePort | None = None,
    ) -> None:
        self._store = store
        self._time = time_port

    def _now(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    async def record_view(self, video_id: str, viewer_id: str) -> RecordViewOutput:
        """
        Append a ViewEvent. Fire-and-forget.

        Never raises: store failures are logged and reported as
        ``recorded=False``.
        """
        errors = validate_ids(video_id, viewer_id)
        if errors:
            logger.warning(
                "Dropping view with invalid ids (video=%r, viewer=%r)", video_id, viewer_id
            )
            return RecordViewOutput(recorded=False, errors=errors, success=False)

        event = ViewEvent(video_id=video_id, viewer_id=viewer_id, viewed_at=self._now())
        try:
            event_id = await self._store.append(VIEWS, event.to_record())
        except Exception:
            logger.warning(
                "Failed to record view of %s by %s", video_id, viewer_id, exc_info=True
            )
            return RecordViewOutput(recorded=False, success=False)

        logger.debug("View recorded: video=%s viewer=%s id=%s", video_id, viewer_id, event_id)
        return RecordViewOutput(recorded=True, event_id=event_id)

    async def toggle_like(self, video_id: str, viewer_id: str) -> LikeToggleResult:
        """
        Toggle the viewer's like on a video.

        Raises:
            ValidationError: blank ids
            NotFoundError: video does not exist
            Any store error, unchanged
        """
        _raise_if_invalid(video_id, viewer_id)

        video_ref = DocRef(VIDEOS, video_id)
        video = await self._store.get(video_ref)
        if video is None:
            raise NotFoundError("Video", video_id)

        like_ref = DocRef(LIKES, like_key(video_id, viewer_id))

        if await self._store.get(like_ref) is not None:
            if await self._store.delete_if_exists(like_ref):
                likes = await self._store.increment(video_ref, "likes", -1, floor=0)
            else:
                # Another session removed it first; counter already moved.
                likes = await self._cached_likes(video_ref)
            logger.debug("Like removed: video=%s viewer=%s likes=%d", video_id, viewer_id, likes)
            return LikeToggleResult(liked=False, likes=likes)

        like = LikeEvent(video_id=video_id, viewer_id=viewer_id, created_at=self._now())
        if await self._store.create_if_absent(like_ref, like.to_record()):
            likes = await self._store.increment(video_ref, "likes", 1)
        else:
            likes = await self._cached_likes(video_ref)
        logger.debug("Like added: video=%s viewer=%s likes=%d", video_id, viewer_id, likes)
        return LikeToggleResult(liked=True, likes=likes)

    async def check_liked(self, video_id: str, viewer_id: str) -> bool:
        """Existence check, no side effects."""
        _raise_if_invalid(video_id, viewer_id)
        return await self._store.get(DocRef(LIKES, like_key(video_id, viewer_id))) is not None

    async def _cached_likes(self, video_ref: DocRef) -> int:
        video = await self._store.get(video_ref)
        if video is None:
            raise NotFoundError("Video", video_ref.key)
        return int(video.get("likes") or 0)


# --- Component Entry Points ---


async def run(
    inp: RecordViewInput | ToggleLikeInput | CheckLikedInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> RecordViewOutput | LikeToggleResult | bool:
    """
    Main entry point for the engagement component.

    Dispatches to appropriate handler based on input type.
    """
    recorder = EventRecorder(store=store, time_port=time_port)
    if isinstance(inp, RecordViewInput):
        return await recorder.record_view(inp.video_id, inp.viewer_id)
    elif isinstance(inp, ToggleLikeInput):
        return await recorder.toggle_like(inp.video_id, inp.viewer_id)
    elif isinstance(inp, CheckLikedInput):
        return await recorder.check_liked(inp.video_id, inp.viewer_id)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
