"""
Engagement component - View and like event recording.
"""

from .component import (
    EventRecorder,
    run,
    validate_ids,
)
from .models import (
    CheckLikedInput,
    EngagementValidationError,
    LikeToggleResult,
    RecordViewInput,
    RecordViewOutput,
    ToggleLikeInput,
)
from .ports import (
    EventStorePort,
    LikeTogglePort,
    TimePort,
    ViewRecorderPort,
)

__all__ = [
    # Component
    "run",
    "EventRecorder",
    # Pure functions
    "validate_ids",
    # Models
    "RecordViewInput",
    "ToggleLikeInput",
    "CheckLikedInput",
    "RecordViewOutput",
    "LikeToggleResult",
    "EngagementValidationError",
    # Ports
    "EventStorePort",
    "TimePort",
    "ViewRecorderPort",
    "LikeTogglePort",
]
