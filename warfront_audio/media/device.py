"""
The playback device contract and a timer-driven device that simulates playback.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from warfront_audio.exceptions import DeviceError

log = logging.getLogger(__name__)


@runtime_checkable
class PlaybackDevice(Protocol):
    """
    Something that turns a source locator into sound.

    `load` and `start` must eventually either return or raise; the engine applies
    no timeout of its own. The ended callback is invoked on the event loop when a
    started source plays through to its end.
    """

    volume: float

    async def load(self, source: str) -> None: ...

    async def start(self) -> None: ...

    def pause(self) -> None: ...

    def set_ended_callback(self, callback: Callable[[], None] | None) -> None: ...


class SimulatedDevice:
    """
    A device that produces no sound but keeps realistic timing.

    Loading takes `load_latency` seconds; a started source "ends" after
    `track_length` seconds of unpaused play.
    """

    def __init__(
        self,
        name: str = "music",
        load_latency: float = 0.2,
        track_length: float = 180.0,
    ):
        self.name = name
        self.volume = 1.0
        self.load_latency = load_latency
        self.track_length = track_length
        self.source: str | None = None
        self._length = track_length
        self._remaining = track_length
        self._started_at: float | None = None
        self._end_handle: asyncio.TimerHandle | None = None
        self._ended_callback: Callable[[], None] | None = None

    @property
    def is_running(self) -> bool:
        return self._end_handle is not None

    def set_ended_callback(self, callback: Callable[[], None] | None) -> None:
        self._ended_callback = callback

    async def load(self, source: str) -> None:
        self._cancel_end()
        self.source = None
        if self.load_latency:
            await asyncio.sleep(self.load_latency)
        self._length = await self._resolve_length(source)
        self._remaining = self._length
        self.source = source
        log.debug(f"[{self.name}] Loaded '{source}' ({self._length:.1f}s).")

    async def start(self) -> None:
        if self.source is None:
            raise DeviceError(f"[{self.name}] Nothing is loaded.")
        if self._end_handle is not None:
            return
        if self._remaining <= 0:
            self._remaining = self._length
        loop = asyncio.get_running_loop()
        self._started_at = loop.time()
        self._end_handle = loop.call_later(self._remaining, self._finish)
        log.debug(f"[{self.name}] Playing '{self.source}' at volume {self.volume:.2f}.")

    def pause(self) -> None:
        if self._end_handle is None:
            return
        loop = asyncio.get_running_loop()
        elapsed = loop.time() - (self._started_at or loop.time())
        self._remaining = max(0.0, self._remaining - elapsed)
        self._cancel_end()
        log.debug(f"[{self.name}] Paused with {self._remaining:.1f}s left.")

    async def _resolve_length(self, source: str) -> float:
        """Returns how long the given source plays for."""
        return self.track_length

    def _cancel_end(self) -> None:
        if self._end_handle is not None:
            self._end_handle.cancel()
            self._end_handle = None
        self._started_at = None

    def _finish(self) -> None:
        self._end_handle = None
        self._started_at = None
        self._remaining = self._length
        log.debug(f"[{self.name}] Reached the end of '{self.source}'.")
        if self._ended_callback:
            self._ended_callback()
