"""
Engagement API Routes.

View recording, like toggling and recently viewed videos.

- POST /{video_id}/views: dwell-gated view, recorded in the background
- POST /{video_id}/like: toggle like, returns state and cached counter
- GET  /{video_id}/like: like state for a viewer
- GET  /recent: a viewer's recently viewed videos
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from src.adapters.clock import SystemClock
from src.adapters.memory_store import InMemoryEventStore
from src.api.deps import get_clock, get_recorder, get_store
from src.components.analytics import RecentlyViewedInput, run_recently_viewed
from src.components.engagement import EventRecorder
from src.core.errors import EngagementError, NetworkError, NotFoundError, ValidationError

router = APIRouter()


# --- Request/Response Models ---


class ViewerRequest(BaseModel):
    """Acting viewer."""

    viewer_id: str = Field(..., min_length=1, description="Viewer user id")


class AcceptedResponse(BaseModel):
    ok: bool = True


class LikeResponse(BaseModel):
    liked: bool
    likes: int


class LikedResponse(BaseModel):
    liked: bool


class OwnerModel(BaseModel):
    uid: str
    display_name: str
    photo_url: str | None = None
    user_type: str


class RecentVideoModel(BaseModel):
    id: str
    title: str
    category: str
    views: int
    likes: int
    owner: OwnerModel


class RecentVideosResponse(BaseModel):
    videos: list[RecentVideoModel]


_ERROR_STATUS: dict[type[EngagementError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NetworkError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _http_error(e: EngagementError) -> HTTPException:
    for error_type, code in _ERROR_STATUS.items():
        if isinstance(e, error_type):
            return HTTPException(status_code=code, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


# --- Routes ---


@router.post(
    "/{video_id}/views",
    response_model=AcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def record_view(
    video_id: str,
    body: ViewerRequest,
    background_tasks: BackgroundTasks,
    recorder: EventRecorder = Depends(get_recorder),
) -> AcceptedResponse:
    """Accept a view; the write happens after the response and never fails it."""
    background_tasks.add_task(recorder.record_view, video_id, body.viewer_id)
    return AcceptedResponse()


@router.post(
    "/{video_id}/like",
    response_model=LikeResponse,
    responses={404: {"description": "Video not found"}},
)
async def toggle_like(
    video_id: str,
    body: ViewerRequest,
    recorder: EventRecorder = Depends(get_recorder),
) -> LikeResponse:
    try:
        result = await recorder.toggle_like(video_id, body.viewer_id)
    except (NotFoundError, ValidationError, NetworkError) as e:
        raise _http_error(e) from e
    return LikeResponse(liked=result.liked, likes=result.likes)


@router.get("/{video_id}/like", response_model=LikedResponse)
async def check_liked(
    video_id: str,
    viewer_id: str = Query(..., min_length=1),
    recorder: EventRecorder = Depends(get_recorder),
) -> LikedResponse:
    try:
        liked = await recorder.check_liked(video_id, viewer_id)
    except (ValidationError, NetworkError) as e:
        raise _http_error(e) from e
    return LikedResponse(liked=liked)


@router.get("/recent", response_model=RecentVideosResponse)
async def recently_viewed(
    viewer_id: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    store: InMemoryEventStore = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> RecentVideosResponse:
    try:
        output = await run_recently_viewed(
            RecentlyViewedInput(viewer_id=viewer_id, limit=limit),
            store=store,
            time_port=clock,
        )
    except NetworkError as e:
        raise _http_error(e) from e

    return RecentVideosResponse(
        videos=[
            RecentVideoModel(
                id=item.video.id,
                title=item.video.title,
                category=item.video.category,
                views=item.video.views,
                likes=item.video.likes,
                owner=OwnerModel(
                    uid=item.owner.user_id,
                    display_name=item.owner.display_name,
                    photo_url=item.owner.photo_url,
                    user_type=item.owner.user_type,
                ),
            )
            for item in output.items
        ]
    )
