# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.store import (
    CompositeIndex,
    DocRef,
    Document,
    EventStorePort,
    FieldFilter,
    OrderBy,
)
from src.core.ports.time import (
    TimePort,
    TimerCallback,
    TimerHandle,
    TimerPort,
)

__all__ = [
    # Store
    "CompositeIndex",
    "DocRef",
    "Document",
    "EventStorePort",
    "FieldFilter",
    "OrderBy",
    # Time
    "TimePort",
    "TimerCallback",
    "TimerHandle",
    "TimerPort",
]
