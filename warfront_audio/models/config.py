"""
Pydantic model for engine configuration.
Provides robust validation for all settings.
"""

import re

from pydantic import BaseModel, Field, field_validator, model_validator


class EngineConfig(BaseModel):
    """A validated configuration model for the engine and its CLI."""

    # Storage
    state_dir: str
    storage_key: str = "warfront_audio"

    # Playback
    autoplay_delay: float = 1.0
    load_latency: float = 0.2
    default_track_length: float = 180.0

    # Source verification
    probe_sources: bool = False
    request_timeout: float = 15.0

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("state_dir")
    @classmethod
    def validate_state_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("State directory cannot be empty.")
        return v

    @field_validator("storage_key")
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """The key becomes a file name, so keep it to a safe character set."""
        if not re.fullmatch(r"[A-Za-z0-9_.-]+", v):
            raise ValueError(
                "Storage key may only contain letters, digits, '.', '_' and '-'."
            )
        return v

    @field_validator("autoplay_delay", "load_latency")
    @classmethod
    def validate_delays(cls, v: float) -> float:
        if v < 0 or v > 60:
            raise ValueError("Delays must be between 0 and 60 seconds.")
        return v

    @model_validator(mode="after")
    def validate_timings(self) -> "EngineConfig":
        """Checks that the simulated and probed timings are usable."""
        if self.default_track_length <= 0:
            raise ValueError("Default track length must be positive.")
        if self.request_timeout <= 0:
            raise ValueError("Request timeout must be positive.")
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
