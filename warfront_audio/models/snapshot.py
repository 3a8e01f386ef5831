"""
Pydantic model for the durable subset of engine state.

The JSON layout uses camelCase keys so snapshots written by the browser build
of the game (`musicTracks`, `musicSettings`, ...) can be restored unchanged.
"""

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from .settings import AlertSettings, MusicSettings
from .track import Track


class AudioSnapshot(BaseModel):
    """Everything that survives a restart. Playback flags and alerts are excluded."""

    music_tracks: list[Track] = Field(default_factory=list)
    music_settings: MusicSettings = Field(default_factory=MusicSettings)
    alert_settings: AlertSettings = Field(default_factory=AlertSettings)
    current_track_index: int = 0

    class Config:
        """Pydantic model configuration."""

        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "AudioSnapshot":
        """A snapshot with two definitions for one track id is corrupt."""
        seen: set[str] = set()
        for track in self.music_tracks:
            if track.id in seen:
                raise ValueError(f"Duplicate track id '{track.id}' in snapshot.")
            seen.add(track.id)
        return self
