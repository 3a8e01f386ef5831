"""
Pydantic models for the music and alert settings records.
Both records are immutable; updates always produce a new validated instance.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class RepeatMode(str, Enum):
    """How playback behaves at the end of a track or of the catalog."""

    NONE = "none"
    ONE = "one"
    ALL = "all"


def clamp_volume(value: float) -> float:
    """Clamps a volume level into the [0, 1] range."""
    return min(1.0, max(0.0, value))


class MusicSettings(BaseModel):
    """Background music configuration."""

    is_enabled: bool = True
    auto_play: bool = True
    volume: float = 0.5
    shuffle: bool = False
    repeat: RepeatMode = RepeatMode.ALL

    class Config:
        """Pydantic model configuration."""

        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    @field_validator("volume")
    @classmethod
    def validate_volume(cls, v: float) -> float:
        return clamp_volume(v)


class AlertSettings(BaseModel):
    """Combat alert configuration."""

    is_enabled: bool = True
    alert_sound_url: str = ""
    volume: float = 0.8
    show_visual_alert: bool = True
    # Seconds. The settings screen caps this at 30 but the engine does not.
    alert_duration: int = Field(default=5, ge=1)

    class Config:
        """Pydantic model configuration."""

        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True
        extra = "ignore"

    @field_validator("volume")
    @classmethod
    def validate_volume(cls, v: float) -> float:
        return clamp_volume(v)
