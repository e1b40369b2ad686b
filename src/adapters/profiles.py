"""
Store-backed profile directory.

Reads user records from the ``users`` collection and exposes them as
ProfileSnapshots (ProfilePort).
"""

from __future__ import annotations

from src.core.entities import USERS, ProfileSnapshot
from src.core.errors import NotFoundError
from src.core.ports.store import DocRef, EventStorePort


class StoreProfileDirectory:
    def __init__(self, store: EventStorePort) -> None:
        self._store = store

    async def get_profile(self, user_id: str) -> ProfileSnapshot:
        record = await self._store.get(DocRef(USERS, user_id))
        if record is None:
            raise NotFoundError("User", user_id)
        return ProfileSnapshot.from_record(user_id, record)
