"""
Connection service stub adapter (dev/MVP).

In-process stand-in for the external connection/matching service that
satisfies ConnectionServicePort.

Key behaviors:
- Investors connect immediately ("accepted")
- A connect from someone who already has a pending request from the target
  accepts it (mutual connection)
- Everyone else leaves a "pending" request
- A second submit for the same pair raises
- Accepted connections are appended to the store's connections collection
  when a store is supplied, so the dashboard can count them
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.components.matching.models import ConnectionResult
from src.core.entities import CONNECTIONS, ProfileSnapshot
from src.core.errors import ValidationError
from src.core.ports.store import EventStorePort
from src.core.ports.time import TimePort

logger = logging.getLogger(__name__)


def _pair(a: str, b: str) -> frozenset[str]:
    return frozenset((a, b))


@dataclass
class StubConnectionService:
    """Dev connection service; keeps requests and connections in memory."""

    store: EventStorePort | None = None
    time_port: TimePort | None = None
    requests: set[tuple[str, str]] = field(default_factory=set)
    connections: set[frozenset[str]] = field(default_factory=set)
    submitted: list[tuple[str, str]] = field(default_factory=list)

    def _now(self) -> datetime:
        if self.time_port:
            return self.time_port.now_utc()
        return datetime.now(UTC)

    async def submit(
        self,
        from_user: str,
        to_user: str,
        from_profile: ProfileSnapshot,
        to_profile: ProfileSnapshot,
    ) -> ConnectionResult:
        await asyncio.sleep(0)
        self.submitted.append((from_user, to_user))

        if from_user == to_user:
            raise ValidationError("to_user", "Cannot connect to yourself")
        if _pair(from_user, to_user) in self.connections:
            raise ValidationError("to_user", "Already connected")
        if (from_user, to_user) in self.requests:
            raise ValidationError("to_user", "Connection request already sent")

        if from_profile.user_type == "investor":
            await self._connect(from_user, to_user)
            return ConnectionResult(status="accepted", message="Connection created")

        if (to_user, from_user) in self.requests:
            self.requests.discard((to_user, from_user))
            await self._connect(from_user, to_user)
            return ConnectionResult(status="accepted", message="Mutual connection created")

        self.requests.add((from_user, to_user))
        logger.debug(
            "Connection request %s (%s) -> %s (%s)",
            from_user,
            from_profile.user_type,
            to_user,
            to_profile.user_type,
        )
        return ConnectionResult(status="pending", message="Connection request sent")

    async def _connect(self, from_user: str, to_user: str) -> None:
        self.connections.add(_pair(from_user, to_user))
        if self.store is not None:
            await self.store.append(
                CONNECTIONS,
                {
                    "user1Id": from_user,
                    "user2Id": to_user,
                    "participants": [from_user, to_user],
                    "status": "accepted",
                    "createdAt": self._now(),
                },
            )
        logger.info("Connection created: %s <-> %s", from_user, to_user)
