"""
Gesture component models.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.entities import SwipeDirection


@dataclass(frozen=True)
class FeedCard:
    """A pitch video card in the swipe feed."""

    video_id: str
    owner_id: str

    @property
    def card_id(self) -> str:
        return self.video_id


@dataclass(frozen=True)
class Decision:
    """Classified gesture, ready for dispatch."""

    direction: SwipeDirection
    video_id: str
    target_user_id: str


@dataclass(frozen=True)
class GestureOutcome:
    """
    Result of feeding a gesture to the interpreter.

    Exactly one of: a decision, a snap back, or a rejection because the card
    already has a decision in flight.
    """

    decision: Decision | None = None
    snapped_back: bool = False
    rejected: bool = False
