"""
Holds the music and alert settings records and applies validated partial updates.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from warfront_audio.exceptions import ValidationError
from warfront_audio.models.settings import AlertSettings, MusicSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingsChange:
    """Describes one committed settings update."""

    kind: str  # "music" or "alert"
    old: BaseModel
    new: BaseModel


class SettingsStore:
    """
    Keeps the latest committed settings records.

    Records are frozen pydantic models. An update builds and validates a complete
    replacement record before swapping it in, so a reader never observes a
    half-applied change.
    """

    def __init__(
        self,
        music: MusicSettings | None = None,
        alert: AlertSettings | None = None,
    ):
        self._music = music or MusicSettings()
        self._alert = alert or AlertSettings()
        self._listeners: list[Callable[[SettingsChange], None]] = []

    @property
    def music(self) -> MusicSettings:
        return self._music

    @property
    def alert(self) -> AlertSettings:
        return self._alert

    def add_listener(self, callback: Callable[[SettingsChange], None]) -> None:
        """Registers a callback invoked after every committed change."""
        self._listeners.append(callback)

    def update_music_settings(self, **changes: Any) -> MusicSettings:
        """
        Merges the given fields into the music settings.

        Raises:
            ValidationError: If a field is unknown or a value is invalid. The
            current record is left untouched.
        """
        new = self._merge(self._music, changes)
        old, self._music = self._music, new
        self._notify("music", old, new)
        return new

    def update_alert_settings(self, **changes: Any) -> AlertSettings:
        """
        Merges the given fields into the alert settings.

        Raises:
            ValidationError: If a field is unknown or a value is invalid.
        """
        new = self._merge(self._alert, changes)
        old, self._alert = self._alert, new
        self._notify("alert", old, new)
        return new

    def replace(
        self,
        music: MusicSettings | None = None,
        alert: AlertSettings | None = None,
    ) -> None:
        """Swaps whole, already validated records in (used when restoring)."""
        if music is not None:
            old_music, self._music = self._music, music
            self._notify("music", old_music, music)
        if alert is not None:
            old_alert, self._alert = self._alert, alert
            self._notify("alert", old_alert, alert)

    @staticmethod
    def _merge(current: BaseModel, changes: dict[str, Any]) -> Any:
        model = type(current)
        fields = model.model_fields
        aliases = {info.alias: name for name, info in fields.items() if info.alias}
        normalized = {}
        for key, value in changes.items():
            name = aliases.get(key, key)
            if name not in fields:
                raise ValidationError(
                    f"Unknown {model.__name__} field '{key}'. "
                    f"Expected one of: {', '.join(sorted(fields))}."
                )
            normalized[name] = value

        try:
            return model.model_validate({**current.model_dump(), **normalized})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {model.__name__} update:\n{e}") from e

    def _notify(self, kind: str, old: BaseModel, new: BaseModel) -> None:
        if old == new:
            return
        log.debug(f"{kind.capitalize()} settings updated: {new!r}")
        change = SettingsChange(kind=kind, old=old, new=new)
        for listener in list(self._listeners):
            listener(change)
