"""
Analytics component port definitions.
"""

from __future__ import annotations

from src.core.ports.store import EventStorePort
from src.core.ports.time import TimePort

__all__ = [
    "EventStorePort",
    "TimePort",
]
