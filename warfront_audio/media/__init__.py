"""
Media Layer.

This package holds the playback device contract and the devices that ship with
the engine, plus helpers for probing local audio files.
"""

from .device import PlaybackDevice, SimulatedDevice
from .probe import probe_duration
from .stream_device import HttpStreamDevice

__all__ = ["HttpStreamDevice", "PlaybackDevice", "SimulatedDevice", "probe_duration"]
