"""
Matching component - Match decision dispatch with timed feedback.

Per card:
    IDLE -> DISPATCHING -> {ACCEPTED | PENDING | ERROR}_FEEDBACK -> IDLE
    IDLE -> PASS_FEEDBACK -> IDLE

Invariants:
- Only connect decisions reach the connection service; pass is local
- At most one outstanding connect request per (from_user, to_user) pair
- Connect failures surface as ERROR_FEEDBACK and are never retried
- The feed advances by one after accepted/pending/pass feedback clears,
  clamped at the last item; it never advances after an error or a like
- close() cancels feedback timers only; in-flight service calls run on
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from src.components.gestures import Decision, FeedCard, GestureInterpreter
from src.core.entities import MatchDecision
from src.core.ports.time import TimePort, TimerHandle

from .models import (
    DispatchOutcome,
    DispatchState,
    FeedbackEvent,
    FeedbackWindows,
    LikeOutcome,
    MatchValidationError,
)
from .ports import ConnectionServicePort, LikeTogglePort, ProfilePort, TimerPort

logger = logging.getLogger(__name__)

FeedbackListener = Callable[[FeedbackEvent], None]


class FeedCursor:
    """Index into the feed, clamped to the last item."""

    def __init__(self, length: int = 0, index: int = 0) -> None:
        self._length = max(length, 0)
        self._index = 0
        self.seek(index)

    @property
    def index(self) -> int:
        return self._index

    @property
    def length(self) -> int:
        return self._length

    def advance(self) -> int:
        if self._index < self._length - 1:
            self._index += 1
        return self._index

    def seek(self, index: int) -> int:
        self._index = min(max(index, 0), max(self._length - 1, 0))
        return self._index

    def reset(self, length: int) -> None:
        """New feed loaded; start again from the top."""
        self._length = max(length, 0)
        self._index = 0


class MatchDispatcher:
    """
    Dispatches gesture decisions for one acting user.

    Feedback changes are published to subscribed listeners; a listener
    should render the most recent FeedbackEvent for a card.
    """

    def __init__(
        self,
        user_id: str,
        *,
        connections: ConnectionServicePort,
        profiles: ProfilePort,
        likes: LikeTogglePort,
        timers: TimerPort,
        interpreter: GestureInterpreter | None = None,
        feed_length: int = 0,
        windows: FeedbackWindows | None = None,
        time_port: TimePort | None = None,
    ) -> None:
        self._user_id = user_id
        self._connections = connections
        self._profiles = profiles
        self._likes = likes
        self._timers = timers
        self._interpreter = interpreter
        self._windows = windows or FeedbackWindows()
        self._time = time_port
        self.cursor = FeedCursor(feed_length)

        self._states: dict[str, DispatchState] = {}
        self._outstanding: set[tuple[str, str]] = set()
        self._feedback_timers: dict[str, TimerHandle] = {}
        self._like_timers: dict[str, TimerHandle] = {}
        self._listeners: list[FeedbackListener] = []
        self._closed = False

    # --- Listeners ---

    def subscribe(self, listener: FeedbackListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: FeedbackEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.error("Feedback listener failed for %s", event.card_id, exc_info=True)

    # --- State ---

    def state(self, card_id: str) -> DispatchState:
        return self._states.get(card_id, DispatchState.IDLE)

    def has_outstanding(self, to_user: str) -> bool:
        return (self._user_id, to_user) in self._outstanding

    def _now(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    def _set_state(self, card_id: str, state: DispatchState, message: str | None = None) -> None:
        if state is DispatchState.IDLE:
            self._states.pop(card_id, None)
        else:
            self._states[card_id] = state
        self._publish(FeedbackEvent(card_id=card_id, state=state, message=message))

    def _show(
        self,
        card_id: str,
        state: DispatchState,
        window_ms: int,
        *,
        advance: bool,
        message: str | None = None,
    ) -> None:
        self._set_state(card_id, state, message)
        if self._closed:
            logger.debug("Dispatcher closed, %s feedback for %s not timed", state.value, card_id)
            return

        def clear() -> None:
            self._feedback_timers.pop(card_id, None)
            self._set_state(card_id, DispatchState.IDLE)
            if advance:
                self.cursor.advance()
            if self._interpreter is not None:
                self._interpreter.settle(card_id)

        self._feedback_timers[card_id] = self._timers.schedule(window_ms, clear)

    def _release_card(self, card_id: str) -> None:
        if self._interpreter is not None:
            self._interpreter.settle(card_id)

    # --- Actions ---

    async def dispatch(self, decision: Decision) -> DispatchOutcome:
        """
        Dispatch a decision for the card showing ``decision.video_id``.

        Never raises; failures come back as ERROR_FEEDBACK outcomes.
        """
        card_id = decision.video_id

        if self._closed:
            return DispatchOutcome(
                card_id=card_id,
                state=self.state(card_id),
                errors=[MatchValidationError("CLOSED", "Dispatcher is closed")],
                success=False,
            )

        if self.state(card_id) is not DispatchState.IDLE:
            return DispatchOutcome(
                card_id=card_id,
                state=self.state(card_id),
                errors=[MatchValidationError("BUSY", "Card already has a decision in flight")],
                success=False,
            )

        to_user = decision.target_user_id
        match = MatchDecision(
            from_user=self._user_id,
            to_user=to_user,
            direction=decision.direction,
            timestamp=self._now(),
        )

        if match.direction == "pass":
            self._show(card_id, DispatchState.PASS_FEEDBACK, self._windows.pass_ms, advance=True)
            return DispatchOutcome(
                card_id=card_id, state=DispatchState.PASS_FEEDBACK, decision=match
            )

        pair = (self._user_id, to_user)
        if pair in self._outstanding:
            self._release_card(card_id)
            return DispatchOutcome(
                card_id=card_id,
                state=DispatchState.IDLE,
                errors=[
                    MatchValidationError(
                        "DUPLICATE_REQUEST",
                        f"Connect request to {to_user} already in flight",
                        "target_user_id",
                    )
                ],
                success=False,
            )

        self._outstanding.add(pair)
        self._set_state(card_id, DispatchState.DISPATCHING)
        try:
            from_profile = await self._profiles.get_profile(match.from_user)
            to_profile = await self._profiles.get_profile(match.to_user)
            result = await self._connections.submit(
                match.from_user, match.to_user, from_profile, to_profile
            )
        except Exception as e:
            logger.warning("Connect %s -> %s failed: %s", self._user_id, to_user, e)
            self._show(
                card_id,
                DispatchState.ERROR_FEEDBACK,
                self._windows.error_ms,
                advance=False,
                message=str(e),
            )
            return DispatchOutcome(
                card_id=card_id,
                state=DispatchState.ERROR_FEEDBACK,
                message=str(e),
                decision=match,
                errors=[MatchValidationError("CONNECT_FAILED", str(e))],
                success=False,
            )
        finally:
            self._outstanding.discard(pair)

        if result.status == "accepted":
            state, window_ms = DispatchState.ACCEPTED_FEEDBACK, self._windows.accepted_ms
        else:
            state, window_ms = DispatchState.PENDING_FEEDBACK, self._windows.pending_ms

        logger.info("Connect %s -> %s: %s", self._user_id, to_user, result.status)
        self._show(card_id, state, window_ms, advance=True, message=result.message or None)
        return DispatchOutcome(
            card_id=card_id, state=state, message=result.message or None, decision=match
        )

    async def like(self, card: FeedCard) -> LikeOutcome:
        """
        Toggle the acting user's like on the card's video.

        Like feedback shows for its window whatever the toggle result; the
        feed does not move.
        """
        card_id = card.card_id
        self._publish(FeedbackEvent(card_id=card_id, state=DispatchState.LIKE_FEEDBACK))

        previous = self._like_timers.pop(card_id, None)
        if previous is not None:
            previous.cancel()
        if not self._closed:

            def clear() -> None:
                self._like_timers.pop(card_id, None)
                self._publish(FeedbackEvent(card_id=card_id, state=self.state(card_id)))

            self._like_timers[card_id] = self._timers.schedule(self._windows.like_ms, clear)

        try:
            result = await self._likes.toggle_like(card.video_id, self._user_id)
        except Exception as e:
            logger.warning("Like toggle on %s failed: %s", card.video_id, e)
            return LikeOutcome(
                card_id=card_id,
                errors=[MatchValidationError("LIKE_FAILED", str(e))],
                success=False,
            )
        return LikeOutcome(card_id=card_id, result=result)

    def close(self) -> None:
        """Cancel every feedback timer. Outstanding service calls are left running."""
        self._closed = True
        for handle in [*self._feedback_timers.values(), *self._like_timers.values()]:
            handle.cancel()
        self._feedback_timers.clear()
        self._like_timers.clear()
