"""
The composition root: wires the stores, controllers and persistence together and
exposes the command and query surface used by the UI and the game.
"""

import logging
import random
from collections.abc import Callable
from datetime import datetime
from typing import Any

from warfront_audio.exceptions import PersistenceError, WarfrontAudioError
from warfront_audio.media.device import PlaybackDevice
from warfront_audio.models.alert import Alert
from warfront_audio.models.settings import AlertSettings, MusicSettings
from warfront_audio.models.snapshot import AudioSnapshot
from warfront_audio.models.state import PlaybackState
from warfront_audio.models.track import Track
from warfront_audio.storage.kv_store import KeyValueStore
from warfront_audio.storage.persistence import DEFAULT_STORAGE_KEY, PersistenceSync

from .alert_manager import AlertLifecycleManager
from .catalog import TrackCatalog
from .playback_controller import DEFAULT_AUTOPLAY_DELAY, PlaybackController
from .settings_store import SettingsStore

log = logging.getLogger(__name__)

# Volume restored by the mute toggle.
UNMUTED_VOLUME = 0.5


class AudioOrchestrator:
    """Owns both devices and every component that drives them."""

    def __init__(
        self,
        music_device: PlaybackDevice,
        alert_device: PlaybackDevice,
        store: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        autoplay_delay: float = DEFAULT_AUTOPLAY_DELAY,
        error_callback: Callable[[WarfrontAudioError], None] | None = None,
        rng: random.Random | None = None,
    ):
        self._error_callback = error_callback
        self.settings = SettingsStore()
        self.catalog = TrackCatalog()
        self.controller = PlaybackController(
            music_device,
            self.catalog,
            self.settings,
            autoplay_delay=autoplay_delay,
            rng=rng,
            on_index_change=lambda _index: self.persistence.save(),
            on_error=self._report,
        )
        self.alerts = AlertLifecycleManager(
            alert_device, self.settings, on_error=self._report
        )
        self.persistence = PersistenceSync(
            store, self.settings, self.catalog, self.controller, key=storage_key
        )

        self.settings.add_listener(self.controller.handle_settings_change)
        self.settings.add_listener(self.alerts.handle_settings_change)
        self.settings.add_listener(lambda _change: self.persistence.save())
        self.catalog.add_listener(self.controller.handle_catalog_change)
        self.catalog.add_listener(lambda _change: self.persistence.save())

    # --- Lifecycle ---

    async def start(self) -> None:
        """Restores saved state and arms autoplay."""
        try:
            self.persistence.load()
        except PersistenceError as e:
            self._report(e)
            log.warning("[yellow]Starting with default audio settings.[/yellow]")
        self.controller.schedule_autoplay()

    async def shutdown(self) -> None:
        """Stops music, drops alerts, and waits for device calls to settle."""
        self.controller.stop()
        self.alerts.clear()
        await self.controller.wait_idle()
        await self.alerts.wait_idle()

    # --- Music commands ---

    def play(self, index: int | None = None) -> bool:
        return self.controller.play(index)

    def pause(self) -> bool:
        return self.controller.pause()

    def next(self) -> bool:
        return self.controller.next()

    def previous(self) -> bool:
        return self.controller.previous()

    def toggle_mute(self) -> MusicSettings:
        volume = 0.0 if self.settings.music.volume > 0 else UNMUTED_VOLUME
        return self.settings.update_music_settings(volume=volume)

    # --- Catalog commands ---

    def add_track(self, track: Track) -> Track:
        return self.catalog.add(track)

    def remove_track(self, track_id: str) -> Track | None:
        return self.catalog.remove(track_id)

    def edit_track(self, track: Track) -> Track:
        return self.catalog.replace(track)

    # --- Settings commands ---

    def update_music_settings(self, **changes: Any) -> MusicSettings:
        return self.settings.update_music_settings(**changes)

    def update_alert_settings(self, **changes: Any) -> AlertSettings:
        return self.settings.update_alert_settings(**changes)

    # --- Alerts ---

    def on_combat(
        self, attacker: str, defender: str, timestamp: datetime | None = None
    ) -> Alert | None:
        """Turns a combat event from the game into an alert."""
        fields: dict[str, Any] = {"attacker": attacker, "defender": defender}
        if timestamp is not None:
            fields["timestamp"] = timestamp
        alert = Alert(**fields)
        return alert if self.alerts.raise_alert(alert) else None

    def dismiss_alert(self, alert_id: str) -> bool:
        return self.alerts.dismiss(alert_id)

    # --- Persistence ---

    def snapshot(self) -> AudioSnapshot:
        return self.persistence.snapshot()

    def restore(self, blob: str | bytes) -> AudioSnapshot:
        return self.persistence.restore(blob)

    # --- Queries ---

    @property
    def playback_state(self) -> PlaybackState:
        return self.controller.state

    @property
    def music_settings(self) -> MusicSettings:
        return self.settings.music

    @property
    def alert_settings(self) -> AlertSettings:
        return self.settings.alert

    @property
    def tracks(self) -> list[Track]:
        return self.catalog.list()

    @property
    def current_track(self) -> Track | None:
        return self.controller.current_track

    @property
    def active_alerts(self) -> list[Alert]:
        return self.alerts.active_alerts

    @property
    def visible_alerts(self) -> list[Alert]:
        """Alerts the UI should draw; none when visual alerts are switched off."""
        if not self.settings.alert.show_visual_alert:
            return []
        return self.alerts.active_alerts

    def _report(self, error: WarfrontAudioError) -> None:
        if self._error_callback:
            self._error_callback(error)
