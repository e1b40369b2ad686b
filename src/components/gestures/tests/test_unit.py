"""
Unit tests for Gestures component.
"""

from __future__ import annotations

import pytest

from src.components.gestures.component import GestureInterpreter, classify_offset
from src.components.gestures.models import FeedCard

CARD = FeedCard(video_id="v1", owner_id="owner-1")
OTHER = FeedCard(video_id="v2", owner_id="owner-2")


class TestClassifyOffset:
    """Threshold classification."""

    @pytest.mark.parametrize(
        ("offset", "expected"),
        [
            (150, "connect"),
            (-150, "pass"),
            (100, None),
            (-100, None),
            (50, None),
            (0, None),
            (100.5, "connect"),
        ],
    )
    def test_offsets(self, offset: float, expected: str | None) -> None:
        assert classify_offset(offset) == expected

    def test_custom_threshold(self) -> None:
        assert classify_offset(60, threshold=50) == "connect"
        assert classify_offset(-40, threshold=50) is None


class TestGestureInterpreter:
    """Per-card in-flight guard."""

    def test_right_swipe_emits_connect(self) -> None:
        interp = GestureInterpreter()
        outcome = interp.release(CARD, 150)

        assert outcome.decision is not None
        assert outcome.decision.direction == "connect"
        assert outcome.decision.video_id == "v1"
        assert outcome.decision.target_user_id == "owner-1"
        assert interp.is_in_flight("v1")

    def test_left_swipe_emits_pass(self) -> None:
        outcome = GestureInterpreter().release(CARD, -150)
        assert outcome.decision is not None
        assert outcome.decision.direction == "pass"

    def test_small_drag_snaps_back_without_locking(self) -> None:
        interp = GestureInterpreter()
        outcome = interp.release(CARD, 50)

        assert outcome.snapped_back
        assert outcome.decision is None
        assert not interp.is_in_flight("v1")

    def test_second_gesture_rejected_until_settled(self) -> None:
        interp = GestureInterpreter()
        interp.release(CARD, 150)

        assert interp.release(CARD, -150).rejected
        assert interp.press(CARD, "pass").rejected

        interp.settle("v1")
        assert interp.release(CARD, -150).decision is not None

    def test_other_cards_unaffected(self) -> None:
        interp = GestureInterpreter()
        interp.release(CARD, 150)
        assert interp.release(OTHER, 150).decision is not None

    def test_button_press_emits_same_decision(self) -> None:
        outcome = GestureInterpreter().press(CARD, "connect")
        assert outcome.decision is not None
        assert outcome.decision.direction == "connect"
        assert outcome.decision.target_user_id == "owner-1"

    def test_rejects_non_positive_threshold(self) -> None:
        with pytest.raises(ValueError):
            GestureInterpreter(threshold=0)
