"""
Reads the playing time of local audio files.
"""

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import mutagen
from mutagen import MutagenError

log = logging.getLogger(__name__)


def source_to_path(source: str) -> Path | None:
    """Returns the filesystem path for a `file:` URI, or None for other schemes."""
    parsed = urlparse(source)
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path))


def probe_duration(filepath: str | Path) -> float:
    """
    Returns the length of an audio file in seconds.

    Checks if the file can be opened by mutagen and has valid stream info.

    Args:
        filepath: Path to the audio file.

    Returns:
        The length in seconds, or 0.0 if it cannot be determined.
    """
    try:
        audio = mutagen.File(filepath)
    except (MutagenError, OSError) as e:
        log.debug(f"Could not probe '{filepath}': {e}")
        return 0.0

    if audio is None or audio.info is None:
        log.debug(f"'{filepath}' is not a recognised audio format.")
        return 0.0
    return max(0.0, float(getattr(audio.info, "length", 0.0) or 0.0))
