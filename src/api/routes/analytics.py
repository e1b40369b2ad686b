"""
Analytics API Routes.

Dashboard over raw engagement events for a video owner.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from src.adapters.clock import SystemClock
from src.adapters.memory_store import InMemoryEventStore
from src.api.deps import get_clock, get_rules, get_store
from src.components.analytics import DashboardInput, run_dashboard
from src.rules.models import Rules

router = APIRouter()


# --- Response Models ---


class DailyBucketModel(BaseModel):
    date: str
    views: int
    likes: int
    connections: int


class CumulativePointModel(BaseModel):
    date: str
    count: int
    cumulative: int


class SummaryModel(BaseModel):
    total_views: int
    total_likes: int
    total_videos: int
    total_connections: int
    window_views: int
    window_likes: int
    window_connections: int
    avg_per_day: int
    engagement_rate: float
    connection_rate: float


class RecentEventModel(BaseModel):
    video_id: str
    user_id: str
    at: datetime


class RecentConnectionModel(BaseModel):
    id: str
    participants: list[str]
    at: datetime


class ErrorModel(BaseModel):
    code: str
    message: str
    field_name: str | None = None


class DashboardResponse(BaseModel):
    user_id: str
    window_days: int
    success: bool
    summary: SummaryModel
    daily: list[DailyBucketModel]
    cumulative_connections: list[CumulativePointModel]
    recent_views: list[RecentEventModel]
    recent_likes: list[RecentEventModel]
    recent_connections: list[RecentConnectionModel]
    errors: list[ErrorModel]


# --- Routes ---


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    user_id: str = Query(..., min_length=1),
    window_days: int | None = Query(None, description="Rolling window in days"),
    rules: Rules = Depends(get_rules),
    store: InMemoryEventStore = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> DashboardResponse:
    """
    Rolling daily buckets plus all-time totals.

    Store failures still return 200 with ``success=false`` and zeroed metrics.
    """
    window = window_days if window_days is not None else rules.analytics.window_days
    if window not in rules.analytics.allowed_windows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"window_days must be one of {rules.analytics.allowed_windows}",
        )

    output = await run_dashboard(
        DashboardInput(
            user_id=user_id,
            window_days=window,
            recent_limit=rules.analytics.recent_limit,
        ),
        store=store,
        time_port=clock,
    )

    s = output.summary
    return DashboardResponse(
        user_id=output.user_id,
        window_days=output.window_days,
        success=output.success,
        summary=SummaryModel(
            total_views=s.total_views,
            total_likes=s.total_likes,
            total_videos=s.total_videos,
            total_connections=s.total_connections,
            window_views=s.window_views,
            window_likes=s.window_likes,
            window_connections=s.window_connections,
            avg_per_day=s.avg_per_day,
            engagement_rate=s.engagement_rate,
            connection_rate=s.connection_rate,
        ),
        daily=[
            DailyBucketModel(date=b.date, views=b.views, likes=b.likes, connections=b.connections)
            for b in output.daily
        ],
        cumulative_connections=[
            CumulativePointModel(date=p.date, count=p.count, cumulative=p.cumulative)
            for p in output.cumulative_connections
        ],
        recent_views=[
            RecentEventModel(video_id=v.video_id, user_id=v.viewer_id, at=v.viewed_at)
            for v in output.recent_views
        ],
        recent_likes=[
            RecentEventModel(video_id=like.video_id, user_id=like.viewer_id, at=like.created_at)
            for like in output.recent_likes
        ],
        recent_connections=[
            RecentConnectionModel(id=c.id, participants=list(c.participants), at=c.created_at)
            for c in output.recent_connections
        ],
        errors=[
            ErrorModel(code=e.code, message=e.message, field_name=e.field_name)
            for e in output.errors
        ],
    )
