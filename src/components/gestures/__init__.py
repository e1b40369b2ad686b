"""
Gestures component - Swipe classification into match decisions.
"""

from .component import DEFAULT_SWIPE_THRESHOLD, GestureInterpreter, classify_offset
from .models import Decision, FeedCard, GestureOutcome

__all__ = [
    "DEFAULT_SWIPE_THRESHOLD",
    "GestureInterpreter",
    "classify_offset",
    "Decision",
    "FeedCard",
    "GestureOutcome",
]
