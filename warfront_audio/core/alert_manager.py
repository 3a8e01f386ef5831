"""
Maintains the queue of active combat alerts and their expiry timers.
"""

import asyncio
import logging
from collections.abc import Callable

from warfront_audio.exceptions import DeviceError, WarfrontAudioError
from warfront_audio.media.device import PlaybackDevice
from warfront_audio.models.alert import Alert
from warfront_audio.models.settings import AlertSettings

from .settings_store import SettingsChange, SettingsStore

log = logging.getLogger(__name__)


class AlertLifecycleManager:
    """
    Owns every alert timer.

    Timers live in a table keyed by alert id. An alert leaves the queue either
    through `dismiss`, which pops and cancels its timer, or through expiry, which
    pops its own entry; either way the timer is released exactly once.
    """

    def __init__(
        self,
        device: PlaybackDevice,
        settings: SettingsStore,
        on_error: Callable[[WarfrontAudioError], None] | None = None,
    ):
        self._device = device
        self._settings = settings
        self._on_error = on_error
        self._alerts: dict[str, Alert] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._sound_task: asyncio.Task | None = None
        self._sound_pending: str | None = None

        device.volume = settings.alert.volume

    @property
    def active_alerts(self) -> list[Alert]:
        return list(self._alerts.values())

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def raise_alert(self, alert: Alert) -> bool:
        """
        Queues an alert, sounds it, and schedules its expiry.

        Returns:
            False if alerts are disabled, no sound is configured, or the alert id
            is already queued.
        """
        settings: AlertSettings = self._settings.alert
        if not settings.is_enabled or not settings.alert_sound_url:
            log.debug(f"Alerts are off; dropping '{alert.message}'.")
            return False
        if alert.id in self._alerts:
            log.warning(f"Alert '{alert.id}' is already active; ignoring.")
            return False

        loop = asyncio.get_running_loop()
        self._alerts[alert.id] = alert
        self._timers[alert.id] = loop.call_later(
            settings.alert_duration, self._expire, alert.id
        )
        log.info(f"[bold red]⚔ {alert.message}[/bold red]")
        self._play_sound(settings.alert_sound_url)
        return True

    def dismiss(self, alert_id: str) -> bool:
        """Removes an alert now. Unknown or already expired ids are ignored."""
        timer = self._timers.pop(alert_id, None)
        if timer is not None:
            timer.cancel()
        if self._alerts.pop(alert_id, None) is None:
            return False
        log.debug(f"Alert '{alert_id}' dismissed.")
        return True

    def clear(self) -> None:
        """Dismisses every active alert."""
        for alert_id in list(self._alerts):
            self.dismiss(alert_id)

    def handle_settings_change(self, change: SettingsChange) -> None:
        if change.kind == "alert" and change.new.volume != change.old.volume:
            self._device.volume = change.new.volume

    async def wait_idle(self) -> None:
        """Waits for any alert sound that is still being started."""
        if self._sound_task is not None and not self._sound_task.done():
            await asyncio.shield(self._sound_task)

    def _expire(self, alert_id: str) -> None:
        self._timers.pop(alert_id, None)
        if self._alerts.pop(alert_id, None) is not None:
            log.debug(f"Alert '{alert_id}' expired.")

    def _play_sound(self, url: str) -> None:
        if self._sound_task is not None and not self._sound_task.done():
            # Coalesce into one replay once the current device call resolves.
            self._sound_pending = url
            return
        self._sound_task = asyncio.create_task(self._run_sound(url))

    async def _run_sound(self, url: str | None) -> None:
        while url:
            try:
                await self._device.load(url)
                await self._device.start()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                error = DeviceError(f"Could not play alert sound '{url}': {e}")
                log.error(f"[red]✗ {error}[/red]")
                if self._on_error:
                    self._on_error(error)
            url, self._sound_pending = self._sound_pending, None
