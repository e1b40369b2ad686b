"""
Matching component - Connect/pass dispatch with timed feedback.
"""

from .component import FeedbackListener, FeedCursor, MatchDispatcher
from .models import (
    ConnectionResult,
    ConnectionStatus,
    DispatchOutcome,
    DispatchState,
    FeedbackEvent,
    FeedbackWindows,
    LikeOutcome,
    MatchValidationError,
)
from .ports import ConnectionServicePort, LikeTogglePort, ProfilePort, TimerPort

__all__ = [
    # Component
    "MatchDispatcher",
    "FeedCursor",
    "FeedbackListener",
    # Models
    "ConnectionResult",
    "ConnectionStatus",
    "DispatchOutcome",
    "DispatchState",
    "FeedbackEvent",
    "FeedbackWindows",
    "LikeOutcome",
    "MatchValidationError",
    # Ports
    "ConnectionServicePort",
    "ProfilePort",
    "LikeTogglePort",
    "TimerPort",
]
