"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the engine: tracks, settings, alerts,
snapshots and configuration.
"""

from .alert import Alert
from .config import EngineConfig
from .settings import AlertSettings, MusicSettings, RepeatMode
from .snapshot import AudioSnapshot
from .state import PlaybackState, PlayerStatus
from .track import Track, new_track_id

__all__ = [
    "Alert",
    "AlertSettings",
    "AudioSnapshot",
    "EngineConfig",
    "MusicSettings",
    "PlaybackState",
    "PlayerStatus",
    "RepeatMode",
    "Track",
    "new_track_id",
]
