"""Tests for the display helpers."""

import pytest

from warfront_audio.utils.formatting import format_duration, format_volume


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "--:--"), (7, "0:07"), (187.9, "3:07"), (3729, "1:02:09")],
)
def test_format_duration(seconds: float, expected: str) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    "volume,expected", [(0.0, "muted"), (0.5, "50%"), (1.0, "100%")]
)
def test_format_volume(volume: float, expected: str) -> None:
    assert format_volume(volume) == expected
