"""
Pydantic model for a playable catalog track.
"""

import uuid
from datetime import datetime, timezone
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN_ARTIST = "Unknown"


def new_track_id() -> str:
    """Generates an opaque identifier for a new track."""
    return uuid.uuid4().hex


NETWORK_SCHEMES = {"http", "https", "ftp"}


def is_valid_source(url: str) -> bool:
    """
    Checks that a source locator is an absolute URI.

    Any scheme is accepted (`data:` and `blob:` included); network schemes
    must also name a host.
    """
    parsed = urlparse(url)
    # A one-letter "scheme" is a Windows drive letter.
    if len(parsed.scheme) < 2:
        return False
    if parsed.scheme in NETWORK_SCHEMES:
        return bool(parsed.netloc)
    return True


class Track(BaseModel):
    """
    A single playable track. Tracks are never mutated in place; an edit is
    modelled as removing the old definition and adding a new one with the same id.
    """

    id: str = Field(default_factory=new_track_id, min_length=1)
    title: str = Field(min_length=1)
    artist: str = UNKNOWN_ARTIST
    url: str
    duration: float = Field(default=0.0, ge=0)
    uploaded_by: str = "admin"
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_active: bool = True

    class Config:
        """Pydantic model configuration."""

        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True
        extra = "ignore"

    @field_validator("artist")
    @classmethod
    def default_artist(cls, v: str) -> str:
        return v or UNKNOWN_ARTIST

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Rejects blank or relative source locators."""
        if not is_valid_source(v):
            raise ValueError(f"'{v}' is not a valid absolute source URL.")
        return v
