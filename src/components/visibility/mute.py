"""
Session mute policy.

Autoplay always starts muted until the user interacts in this session;
after that the last explicit toggle wins. The preference is read once at
session start and written on every toggle.
"""

from __future__ import annotations

import logging

from .ports import PreferenceStorePort

logger = logging.getLogger(__name__)


def preference_key(user_id: str | None) -> str:
    return f"arc:muted:{user_id}" if user_id else "arc:muted:anon"


class MutePolicy:
    def __init__(self, preferences: PreferenceStorePort, user_id: str | None = None) -> None:
        self._preferences = preferences
        self._key = preference_key(user_id)
        self._interacted = False
        self._muted = True

        try:
            stored = preferences.get(self._key)
        except (OSError, ValueError):
            logger.warning("Could not read mute preference %s", self._key, exc_info=True)
            stored = None
        if stored is not None:
            self._muted = stored == "true"

    @property
    def key(self) -> str:
        return self._key

    @property
    def interacted(self) -> bool:
        return self._interacted

    @property
    def preferred_muted(self) -> bool:
        """Persisted preference, regardless of interaction."""
        return self._muted

    @property
    def muted(self) -> bool:
        """Mute flag to use for the next autoplay."""
        if not self._interacted:
            return True
        return self._muted

    def mark_interaction(self) -> None:
        """Explicit play/pause tap."""
        self._interacted = True

    def toggle(self) -> bool:
        """Flip mute, persist it, and return the new value."""
        self._interacted = True
        self._muted = not self._muted
        try:
            self._preferences.set(self._key, "true" if self._muted else "false")
        except OSError:
            logger.warning("Could not persist mute preference %s", self._key, exc_info=True)
        return self._muted
