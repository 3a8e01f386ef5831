"""
Helper functions for formatting data into human-readable strings.
"""

from datetime import datetime


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a clock string (e.g., '3:07' or '1:02:09').
    Unknown durations (0) render as '--:--'.
    """
    s = int(seconds)
    if s <= 0:
        return "--:--"
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_volume(volume: float) -> str:
    """Formats a [0, 1] volume as a percentage, e.g. '80%' or 'muted'."""
    if volume <= 0:
        return "muted"
    return f"{round(volume * 100)}%"


def format_timestamp(moment: datetime) -> str:
    """Formats a timestamp in local time for alert listings."""
    return moment.astimezone().strftime("%H:%M:%S")
