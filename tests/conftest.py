from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.memory_store import InMemoryEventStore
from src.adapters.timers import ManualTimers


class FixedClock:
    """TimePort that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 1, 14, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()
