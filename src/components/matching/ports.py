"""
Matching component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.components.engagement.ports import LikeTogglePort
from src.core.entities import ProfileSnapshot
from src.core.ports.time import TimerPort

from .models import ConnectionResult

__all__ = [
    "ConnectionServicePort",
    "ProfilePort",
    "LikeTogglePort",
    "TimerPort",
]


class ConnectionServicePort(Protocol):
    """External connection/matching service."""

    async def submit(
        self,
        from_user: str,
        to_user: str,
        from_profile: ProfileSnapshot,
        to_profile: ProfileSnapshot,
    ) -> ConnectionResult:
        """
        Submit a connect request.

        Raises on duplicate requests or transport failures.
        """
        ...


class ProfilePort(Protocol):
    """Role-specific profile lookup."""

    async def get_profile(self, user_id: str) -> ProfileSnapshot:
        """
        Raises:
            NotFoundError: no such user
        """
        ...
