"""
Gestures component - Swipe classification.

Turns a horizontal drag release (or a connect/pass button press) into a
Decision for the match dispatcher.

Invariants:
- |offset| must strictly exceed the threshold; exactly the threshold snaps back
- Positive offsets connect, negative offsets pass
- One decision in flight per card; gestures on a busy card are rejected,
  never queued
"""

from __future__ import annotations

import logging

from src.core.entities import SwipeDirection

from .models import Decision, FeedCard, GestureOutcome

logger = logging.getLogger(__name__)

DEFAULT_SWIPE_THRESHOLD = 100.0


# --- Pure Functions (Functional Core) ---


def classify_offset(
    offset: float, threshold: float = DEFAULT_SWIPE_THRESHOLD
) -> SwipeDirection | None:
    """
    Classify a horizontal release offset.

    Returns:
        "connect" for a right swipe, "pass" for a left swipe, None to snap back.
    """
    if abs(offset) > threshold:
        return "connect" if offset > 0 else "pass"
    return None


# --- Interpreter ---


class GestureInterpreter:
    """Stateful wrapper that enforces one in-flight decision per card."""

    def __init__(self, threshold: float = DEFAULT_SWIPE_THRESHOLD) -> None:
        if threshold <= 0:
            raise ValueError("Swipe threshold must be positive")
        self._threshold = threshold
        self._in_flight: set[str] = set()

    @property
    def threshold(self) -> float:
        return self._threshold

    def is_in_flight(self, card_id: str) -> bool:
        return card_id in self._in_flight

    def release(self, card: FeedCard, offset: float) -> GestureOutcome:
        """Drag released at ``offset`` horizontal units from rest."""
        if card.card_id in self._in_flight:
            logger.debug("Gesture on %s rejected, decision in flight", card.card_id)
            return GestureOutcome(rejected=True)

        direction = classify_offset(offset, self._threshold)
        if direction is None:
            return GestureOutcome(snapped_back=True)
        return self._emit(card, direction)

    def press(self, card: FeedCard, direction: SwipeDirection) -> GestureOutcome:
        """Explicit connect/pass button."""
        if card.card_id in self._in_flight:
            logger.debug("Button on %s rejected, decision in flight", card.card_id)
            return GestureOutcome(rejected=True)
        return self._emit(card, direction)

    def settle(self, card_id: str) -> None:
        """Dispatch for the card finished; accept gestures again."""
        self._in_flight.discard(card_id)

    def _emit(self, card: FeedCard, direction: SwipeDirection) -> GestureOutcome:
        self._in_flight.add(card.card_id)
        return GestureOutcome(
            decision=Decision(
                direction=direction,
                video_id=card.video_id,
                target_user_id=card.owner_id,
            )
        )
