"""
Matching component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from src.components.engagement.models import LikeToggleResult
from src.core.entities import MatchDecision

ConnectionStatus = Literal["accepted", "pending"]


class DispatchState(str, Enum):
    """Per-card dispatch state; every feedback state returns to IDLE."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    ACCEPTED_FEEDBACK = "accepted"
    PENDING_FEEDBACK = "pending"
    ERROR_FEEDBACK = "error"
    PASS_FEEDBACK = "pass"
    LIKE_FEEDBACK = "like"


@dataclass(frozen=True)
class MatchValidationError:
    """Dispatch rejection or failure."""

    code: str
    message: str
    field_name: str | None = None


@dataclass(frozen=True)
class FeedbackWindows:
    """How long each feedback state stays on screen, in milliseconds."""

    accepted_ms: int = 800
    pending_ms: int = 800
    pass_ms: int = 800
    error_ms: int = 1500
    like_ms: int = 1000


@dataclass(frozen=True)
class ConnectionResult:
    """What the connection service answered."""

    status: ConnectionStatus
    message: str = ""


@dataclass(frozen=True)
class FeedbackEvent:
    """Published to listeners on every feedback change; IDLE clears it."""

    card_id: str
    state: DispatchState
    message: str | None = None


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of dispatching one decision."""

    card_id: str
    state: DispatchState
    message: str | None = None
    decision: MatchDecision | None = None
    errors: list[MatchValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LikeOutcome:
    """Result of the like action; the feed never moves on a like."""

    card_id: str
    result: LikeToggleResult | None = None
    errors: list[MatchValidationError] = field(default_factory=list)
    success: bool = True
