"""Test fixtures for warfront_audio tests."""

import asyncio
from collections.abc import Callable

import pytest

from warfront_audio.core.catalog import TrackCatalog
from warfront_audio.core.playback_controller import PlaybackController
from warfront_audio.core.settings_store import SettingsStore
from warfront_audio.models.track import Track


class FakeDevice:
    """A scriptable playback device.

    With `auto_complete` set, `load` returns (or raises `fail_with`) at once.
    Otherwise every `load` blocks until the test calls `complete()`.
    """

    def __init__(self, auto_complete: bool = True) -> None:
        self.auto_complete = auto_complete
        self.volume = 1.0
        self.loads: list[str] = []
        self.starts = 0
        self.pauses = 0
        self.fail_with: Exception | None = None
        self._pending: list[asyncio.Future] = []
        self._ended_callback: Callable[[], None] | None = None

    def set_ended_callback(self, callback: Callable[[], None] | None) -> None:
        self._ended_callback = callback

    async def load(self, source: str) -> None:
        self.loads.append(source)
        if self.auto_complete:
            if self.fail_with is not None:
                raise self.fail_with
            return
        future = asyncio.get_running_loop().create_future()
        self._pending.append(future)
        await future

    async def start(self) -> None:
        self.starts += 1

    def pause(self) -> None:
        self.pauses += 1

    @property
    def pending_loads(self) -> int:
        return len(self._pending)

    def complete(self, error: Exception | None = None) -> None:
        """Resolves the oldest pending load."""
        future = self._pending.pop(0)
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(None)

    def finish_track(self) -> None:
        """Signals that the playing source reached its end."""
        assert self._ended_callback is not None
        self._ended_callback()


async def settle() -> None:
    """Lets scheduled tasks and callbacks run."""
    for _ in range(10):
        await asyncio.sleep(0)


def make_track(n: int | str) -> Track:
    return Track(
        id=f"t{n}",
        title=f"Track {n}",
        artist="Band",
        url=f"https://music.example.com/{n}.mp3",
    )


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def settings() -> SettingsStore:
    store = SettingsStore()
    store.update_music_settings(auto_play=False)
    return store


@pytest.fixture
def catalog() -> TrackCatalog:
    return TrackCatalog([make_track("a"), make_track("b"), make_track("c")])


@pytest.fixture
def errors() -> list:
    return []


@pytest.fixture
def controller(
    device: FakeDevice,
    catalog: TrackCatalog,
    settings: SettingsStore,
    errors: list,
) -> PlaybackController:
    ctrl = PlaybackController(
        device, catalog, settings, autoplay_delay=0.0, on_error=errors.append
    )
    catalog.add_listener(ctrl.handle_catalog_change)
    settings.add_listener(ctrl.handle_settings_change)
    return ctrl
