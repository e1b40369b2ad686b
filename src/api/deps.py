from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.clock import SystemClock
from src.adapters.memory_store import InMemoryEventStore
from src.components.engagement import EventRecorder
from src.rules.loader import composite_indexes, load_rules, rules_path_from_env
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.rules_path: Path = rules_path_from_env()


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Adapters ---
@lru_cache
def get_store() -> InMemoryEventStore:
    """Process-wide store with the composite indexes declared in rules."""
    rules = get_rules(get_settings())
    return InMemoryEventStore(indexes=composite_indexes(rules))


@lru_cache
def get_clock() -> SystemClock:
    return SystemClock()


# --- Components ---
def get_recorder(
    store: InMemoryEventStore = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> EventRecorder:
    return EventRecorder(store=store, time_port=clock)
