"""
The music playback state machine.

The controller is the only component that drives the music device. Device work
runs in a single background task; `is_loading` gates new requests so that at
most one load is ever in flight. A request issued while a load is pending
supersedes it: every request carries a generation number, and a completion whose
generation is no longer current is discarded instead of committing `playing`.
"""

import asyncio
import logging
import random
from collections.abc import Callable

from warfront_audio.exceptions import DeviceError, WarfrontAudioError
from warfront_audio.media.device import PlaybackDevice
from warfront_audio.models.settings import MusicSettings, RepeatMode
from warfront_audio.models.state import PlaybackState, PlayerStatus
from warfront_audio.models.track import Track
from warfront_audio.utils.shuffle import ShuffleCycle

from .catalog import CatalogChange, TrackCatalog
from .settings_store import SettingsChange, SettingsStore

log = logging.getLogger(__name__)

DEFAULT_AUTOPLAY_DELAY = 1.0


class PlaybackController:
    """Owns the current track index and the playing/loading/paused flags."""

    def __init__(
        self,
        device: PlaybackDevice,
        catalog: TrackCatalog,
        settings: SettingsStore,
        autoplay_delay: float = DEFAULT_AUTOPLAY_DELAY,
        rng: random.Random | None = None,
        on_index_change: Callable[[int], None] | None = None,
        on_error: Callable[[WarfrontAudioError], None] | None = None,
    ):
        self._device = device
        self._catalog = catalog
        self._settings = settings
        self.autoplay_delay = autoplay_delay
        self._shuffle = ShuffleCycle(rng)
        self._on_index_change = on_index_change
        self._on_error = on_error

        self._index = 0
        self._is_playing = False
        self._is_paused = False
        self._is_loading = False
        self._generation = 0
        self._target: int | None = None
        self._load_task: asyncio.Task | None = None
        self._autoplay_handle: asyncio.TimerHandle | None = None

        device.set_ended_callback(self._on_track_ended)
        device.volume = settings.music.volume

    # --- Queries ---

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_track(self) -> Track | None:
        return self._catalog.at(self._index)

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def autoplay_pending(self) -> bool:
        return self._autoplay_handle is not None

    @property
    def status(self) -> PlayerStatus:
        if not self._settings.music.is_enabled or not len(self._catalog):
            return PlayerStatus.IDLE
        if self._is_loading:
            return PlayerStatus.LOADING
        if self._is_playing:
            return PlayerStatus.PLAYING
        if self._is_paused:
            return PlayerStatus.PAUSED
        return PlayerStatus.STOPPED

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            current_track_index=self._index,
            is_playing=self._is_playing,
            is_loading=self._is_loading,
            status=self.status,
        )

    # --- Commands ---

    def play(self, index: int | None = None) -> bool:
        """
        Starts playback of the track at `index`, or of the current track.

        Returns:
            True if the request was accepted. Rejected requests change nothing.
        """
        if not self._settings.music.is_enabled:
            log.debug("Music is disabled; ignoring play request.")
            return False
        size = len(self._catalog)
        if size == 0:
            log.debug("Catalog is empty; ignoring play request.")
            return False

        if index is None:
            if self._is_loading:
                log.debug("A track is already loading; ignoring play request.")
                return False
            if self._is_playing:
                return False
            return self._begin(self._index, resume=self._is_paused)

        if not 0 <= index < size:
            log.warning(f"Track index {index} is out of range (0-{size - 1}).")
            return False

        if self._is_loading:
            if index == self._target:
                return False
            # The in-flight device call finishes first; the loader then picks
            # up the new target.
            self._generation += 1
            self._target = index
            self._set_index(index)
            log.debug(f"Superseding pending load with track {index}.")
            return True

        return self._begin(index, resume=False)

    def pause(self) -> bool:
        """Pauses the playing track. Does nothing unless something is playing."""
        if not self._is_playing:
            return False
        try:
            self._device.pause()
        except Exception as e:
            self._report(DeviceError(f"Could not pause playback: {e}"))
        self._is_playing = False
        self._is_paused = True
        log.debug("Playback paused.")
        return True

    def stop(self) -> None:
        """Cancels pending autoplay and any in-flight request, and halts the device."""
        self.cancel_autoplay()
        was_active = self._is_playing or self._is_paused
        if self._is_loading:
            # The loader notices the bump and releases `is_loading` once the
            # device call it is awaiting resolves.
            self._generation += 1
            self._target = None
        self._is_playing = False
        self._is_paused = False
        if was_active:
            self._pause_device()

    def next(self) -> bool:
        """Advances under the active repeat and shuffle policy."""
        size = len(self._catalog)
        if size == 0:
            return False
        target = self._next_index(size)
        if target is None:
            log.debug(f"End of catalog with repeat={self._repeat.value}; holding.")
            return False
        return self.play(target)

    def previous(self) -> bool:
        """Steps back one track; wraps to the last track only with repeat=all."""
        size = len(self._catalog)
        if size == 0:
            return False
        target = self._index - 1
        if target < 0:
            if self._repeat is not RepeatMode.ALL:
                return False
            target = size - 1
        return self.play(target)

    def restore_index(self, index: int) -> None:
        """Sets the current index from a snapshot, clamped into the catalog."""
        if not 0 <= index < len(self._catalog):
            index = 0
        self._set_index(index)

    # --- Autoplay ---

    def schedule_autoplay(self) -> bool:
        """
        Arms a single deferred `play()` when music is enabled with auto-play on
        and there is something to play.
        """
        music = self._settings.music
        if not (music.is_enabled and music.auto_play) or not len(self._catalog):
            return False
        if self._autoplay_handle is not None:
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running event loop; autoplay not armed.")
            return False
        self._autoplay_handle = loop.call_later(self.autoplay_delay, self._autoplay)
        log.debug(f"Autoplay armed for {self.autoplay_delay:.1f}s from now.")
        return True

    def cancel_autoplay(self) -> None:
        if self._autoplay_handle is not None:
            self._autoplay_handle.cancel()
            self._autoplay_handle = None

    def _autoplay(self) -> None:
        self._autoplay_handle = None
        music = self._settings.music
        if not (music.is_enabled and music.auto_play):
            return
        if self._is_playing or self._is_loading:
            return
        log.info("Starting background music.")
        self.play()

    # --- Reactions to other components ---

    def handle_settings_change(self, change: SettingsChange) -> None:
        if change.kind != "music":
            return
        old: MusicSettings = change.old
        new: MusicSettings = change.new
        if new.volume != old.volume:
            self._device.volume = new.volume
        if new.shuffle != old.shuffle:
            self._shuffle.reset()
        if old.is_enabled and not new.is_enabled:
            log.info("Music disabled; stopping playback.")
            self.stop()
        elif (new.is_enabled and not old.is_enabled) or (
            new.auto_play and not old.auto_play
        ):
            self.schedule_autoplay()

    def handle_catalog_change(self, change: CatalogChange) -> None:
        size = len(self._catalog)
        self._shuffle.reset()

        if change.kind == "added":
            if size == 1:
                self.schedule_autoplay()
            return

        if change.kind == "reset":
            self.stop()
            self._set_index(0)
            if size:
                self.schedule_autoplay()
            return

        # removed
        if size == 0:
            log.info("Catalog is empty; playback stopped.")
            self.stop()
            self._set_index(0)
            return

        position = change.position
        if self._is_loading and self._target is not None:
            if position < self._target:
                self._target -= 1
            elif position == self._target:
                self._generation += 1
                self._target = None

        if position < self._index:
            self._set_index(self._index - 1)
        elif position == self._index:
            if self._is_playing or self._is_paused:
                self._is_playing = False
                self._is_paused = False
                self._pause_device()
            if self._index >= size:
                self._set_index(0)

    async def wait_idle(self) -> None:
        """Waits for the background device task, if any, to finish."""
        if self._load_task is not None and not self._load_task.done():
            await asyncio.shield(self._load_task)

    # --- Internals ---

    @property
    def _repeat(self) -> RepeatMode:
        return self._settings.music.repeat

    def _next_index(self, size: int) -> int | None:
        music = self._settings.music
        wrap = music.repeat is RepeatMode.ALL
        if music.shuffle and size > 1:
            return self._shuffle.next_index(self._index, size, wrap=wrap)
        target = self._index + 1
        if target < size:
            return target
        return 0 if wrap else None

    def _set_index(self, index: int) -> None:
        if index == self._index:
            return
        self._index = index
        if self._on_index_change:
            self._on_index_change(index)

    def _begin(self, index: int, resume: bool) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.warning("No running event loop; cannot start playback.")
            return False
        self._generation += 1
        self._target = index
        self._is_loading = True
        self._is_playing = False
        self._is_paused = False
        self._set_index(index)
        self._load_task = loop.create_task(self._run_requests(resume))
        return True

    async def _run_requests(self, resume: bool) -> None:
        """Drives the device until the latest request has been answered."""
        try:
            while self._target is not None:
                generation = self._generation
                track = self._catalog.at(self._target)
                if track is None:
                    self._target = None
                    break
                error: Exception | None = None
                try:
                    if not resume:
                        await self._device.load(track.url)
                    if generation == self._generation:
                        await self._device.start()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    error = e

                if generation != self._generation:
                    log.debug(f"Discarding stale completion for '{track.title}'.")
                    resume = False
                    continue

                self._target = None
                if error is not None:
                    self._report(
                        DeviceError(f"Could not play '{track.title}': {error}")
                    )
                else:
                    self._is_playing = True
                    log.info(f"Now playing: {track.title} - {track.artist}")
                return

            # Stopped while a device call was pending; undo whatever it started.
            self._pause_device()
        finally:
            self._is_loading = False

    def _pause_device(self) -> None:
        try:
            self._device.pause()
        except Exception as e:
            self._report(DeviceError(f"Could not halt playback: {e}"))

    def _on_track_ended(self) -> None:
        if not self._is_playing:
            return
        self._is_playing = False
        if self._repeat is RepeatMode.ONE:
            self.play(self._index)
        elif not self.next():
            log.info("Reached the end of the catalog; playback stopped.")

    def _report(self, error: WarfrontAudioError) -> None:
        log.error(f"[red]✗ {error}[/red]")
        if self._on_error:
            self._on_error(error)
