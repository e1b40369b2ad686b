"""
Visibility component - Autoplay and dwell-gated view recording.
"""

from .channel import ChannelClosedError, IntersectionChannel
from .component import VisibilityMonitor
from .models import FeedElement, IntersectionEntry, PlayState, VisibilityConfig
from .mute import MutePolicy, preference_key
from .ports import PlayerPort, PreferenceStorePort, TimerPort, ViewRecorderPort

__all__ = [
    "VisibilityMonitor",
    "IntersectionChannel",
    "ChannelClosedError",
    "MutePolicy",
    "preference_key",
    # Models
    "FeedElement",
    "IntersectionEntry",
    "PlayState",
    "VisibilityConfig",
    # Ports
    "PlayerPort",
    "PreferenceStorePort",
    "TimerPort",
    "ViewRecorderPort",
]
