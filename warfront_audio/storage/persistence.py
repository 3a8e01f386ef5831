"""
Snapshots the durable subset of engine state into a key-value store and
restores it on startup.
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import ValidationError as PydanticValidationError

from warfront_audio.core.catalog import TrackCatalog
from warfront_audio.core.playback_controller import PlaybackController
from warfront_audio.core.settings_store import SettingsStore
from warfront_audio.exceptions import PersistenceError
from warfront_audio.models.snapshot import AudioSnapshot

from .kv_store import KeyValueStore

log = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "warfront_audio"


class PersistenceSync:
    """
    One-way adapter between the live stores and durable storage.

    Snapshots cover the catalog, both settings records and the current track
    index. Playback flags and alerts are never written: nothing that is
    playing or on screen survives a restart.
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: SettingsStore,
        catalog: TrackCatalog,
        controller: PlaybackController,
        key: str = DEFAULT_STORAGE_KEY,
    ):
        self.store = store
        self.key = key
        self._settings = settings
        self._catalog = catalog
        self._controller = controller
        self._paused = 0

    def snapshot(self) -> AudioSnapshot:
        """Builds a snapshot of the current durable state."""
        return AudioSnapshot(
            music_tracks=self._catalog.list(),
            music_settings=self._settings.music,
            alert_settings=self._settings.alert,
            current_track_index=self._controller.current_index,
        )

    def dumps(self) -> str:
        """Serializes the current snapshot to JSON."""
        return self.snapshot().model_dump_json(by_alias=True)

    @contextmanager
    def paused_writes(self) -> Iterator[None]:
        """Suppresses `save` for the duration of a multi-step update."""
        self._paused += 1
        try:
            yield
        finally:
            self._paused -= 1

    def save(self) -> bool:
        """
        Writes the current snapshot to the store.

        Best effort: failures are logged and reported through the return value,
        never raised to the caller that changed the state.
        """
        if self._paused:
            return False
        try:
            self.store.set(self.key, self.dumps())
            return True
        except Exception as e:
            log.warning(f"[yellow]Could not save audio state:[/] {e}")
            return False

    @staticmethod
    def parse(blob: str | bytes) -> AudioSnapshot:
        """
        Parses a serialized snapshot. Unknown fields are ignored and missing
        fields take their defaults.

        Raises:
            PersistenceError: If the data is not a valid snapshot.
        """
        try:
            data = json.loads(blob)
        except (
            json.JSONDecodeError,
            UnicodeDecodeError,
            TypeError,
            RecursionError,
        ) as e:
            raise PersistenceError(f"Snapshot is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(
                f"Snapshot must be a JSON object, got {type(data).__name__}."
            )
        try:
            return AudioSnapshot.model_validate(data)
        except PydanticValidationError as e:
            raise PersistenceError(f"Snapshot validation failed:\n{e}") from e

    def restore(self, blob: str | bytes) -> AudioSnapshot:
        """
        Parses and applies a snapshot. All or nothing: the blob is fully
        validated before any live state is touched.

        Raises:
            PersistenceError: If the blob is corrupt. Live state is unchanged.
        """
        snapshot = self.parse(blob)
        with self.paused_writes():
            self._settings.replace(
                music=snapshot.music_settings, alert=snapshot.alert_settings
            )
            self._catalog.reset(snapshot.music_tracks)
            self._controller.restore_index(snapshot.current_track_index)
        log.info(
            f"Restored {len(snapshot.music_tracks)} tracks from saved audio state."
        )
        self.save()
        return snapshot

    def load(self) -> bool:
        """
        Restores from the store, if anything has been saved there.

        Returns:
            True if a snapshot was found and applied.

        Raises:
            PersistenceError: If the stored snapshot is corrupt or unreadable.
        """
        try:
            blob = self.store.get(self.key)
        except OSError as e:
            raise PersistenceError(f"Could not read saved audio state: {e}") from e
        if blob is None:
            log.debug(f"No saved audio state under '{self.key}'.")
            return False
        self.restore(blob)
        return True
