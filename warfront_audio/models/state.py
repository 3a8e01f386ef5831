"""
Read-only view of the music playback state handed to UI collaborators.
"""

from dataclasses import dataclass
from enum import Enum


class PlayerStatus(Enum):
    """Observable states of the playback controller."""

    IDLE = "idle"  # No tracks, or music disabled
    STOPPED = "stopped"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackState:
    """A consistent point-in-time copy of the controller's flags."""

    current_track_index: int = 0
    is_playing: bool = False
    is_loading: bool = False
    status: PlayerStatus = PlayerStatus.IDLE
