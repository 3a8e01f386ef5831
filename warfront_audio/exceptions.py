"""
Defines custom exceptions for the engine to allow for more specific error handling.
"""


class WarfrontAudioError(Exception):
    """Base exception for all application-specific errors."""


class ValidationError(WarfrontAudioError):
    """Raised when a settings update contains unknown fields or invalid values."""


class DuplicateIdError(WarfrontAudioError):
    """Raised when a track is added with an id that is already in the catalog."""


class TrackNotFoundError(WarfrontAudioError):
    """Raised when an edit targets a track id that is not in the catalog."""


class DeviceError(WarfrontAudioError):
    """
    Raised or reported when a playback device fails to load or start a source.
    """


class PersistenceError(WarfrontAudioError):
    """Raised when a saved snapshot is corrupt or cannot be parsed."""


class ConfigurationError(WarfrontAudioError):
    """Raised for issues related to configuration loading or validation."""
