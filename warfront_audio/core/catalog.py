"""
The ordered collection of playable tracks.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from warfront_audio.exceptions import DuplicateIdError, TrackNotFoundError
from warfront_audio.models.track import Track

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogChange:
    """
    Describes one committed catalog mutation.

    `position` is where the track was inserted or removed from. It is -1 for
    a reset.
    """

    kind: str  # "added", "removed" or "reset"
    track: Track | None
    position: int


class TrackCatalog:
    """Insertion-ordered tracks keyed by a unique id. Owns no playback state."""

    def __init__(self, tracks: Iterable[Track] = ()):
        self._tracks: list[Track] = []
        self._listeners: list[Callable[[CatalogChange], None]] = []
        for track in tracks:
            self.add(track)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks))

    def add_listener(self, callback: Callable[[CatalogChange], None]) -> None:
        """Registers a callback invoked after every committed change."""
        self._listeners.append(callback)

    def list(self) -> list[Track]:
        """Returns a copy of the tracks in insertion order."""
        return list(self._tracks)

    def find(self, track_id: str) -> Track | None:
        return next((t for t in self._tracks if t.id == track_id), None)

    def index_of(self, track_id: str) -> int | None:
        return next(
            (i for i, t in enumerate(self._tracks) if t.id == track_id), None
        )

    def at(self, index: int) -> Track | None:
        if 0 <= index < len(self._tracks):
            return self._tracks[index]
        return None

    def add(self, track: Track) -> Track:
        """
        Appends a track.

        Raises:
            DuplicateIdError: If a track with the same id is already present.
        """
        if self.find(track.id) is not None:
            raise DuplicateIdError(f"A track with id '{track.id}' already exists.")
        self._tracks.append(track)
        log.debug(f"Added track '{track.title}' ({track.id}).")
        self._notify(CatalogChange("added", track, len(self._tracks) - 1))
        return track

    def remove(self, track_id: str) -> Track | None:
        """Removes a track by id. Unknown ids are ignored and return None."""
        position = self.index_of(track_id)
        if position is None:
            return None
        track = self._tracks.pop(position)
        log.debug(f"Removed track '{track.title}' ({track.id}).")
        self._notify(CatalogChange("removed", track, position))
        return track

    def replace(self, track: Track) -> Track:
        """
        Replaces the definition of an existing track id.

        Listeners observe a `removed` followed by an `added` change; the track
        moves to the end of the catalog.

        Raises:
            TrackNotFoundError: If no track with that id exists.
        """
        if self.remove(track.id) is None:
            raise TrackNotFoundError(f"No track with id '{track.id}'.")
        return self.add(track)

    def reset(self, tracks: Iterable[Track]) -> None:
        """
        Replaces the whole sequence at once.

        Raises:
            DuplicateIdError: If the new sequence repeats an id. Nothing changes.
        """
        new_tracks = list(tracks)
        ids = [t.id for t in new_tracks]
        if len(set(ids)) != len(ids):
            raise DuplicateIdError("Track ids must be unique.")
        self._tracks = new_tracks
        self._notify(CatalogChange("reset", None, -1))

    def _notify(self, change: CatalogChange) -> None:
        for listener in list(self._listeners):
            listener(change)
