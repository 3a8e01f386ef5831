"""
Shuffle ordering that offers every track once per cycle before repeating any.
"""

import logging
import random

log = logging.getLogger(__name__)


class ShuffleCycle:
    """
    Hands out catalog indices in a random order, one cycle at a time.

    A cycle is a permutation of every index except the one playing when the
    cycle began. The playing track counts as already offered, so no track is
    repeated until all others have had a turn.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._remaining: list[int] = []
        self._size = 0
        self._exhausted = False

    def reset(self) -> None:
        """Drops the current cycle; the next call starts a fresh one."""
        self._remaining = []
        self._size = 0
        self._exhausted = False

    def next_index(self, current: int, size: int, wrap: bool = True) -> int | None:
        """
        Returns the next index to play.

        Args:
            current: The index that is playing now.
            size: Number of tracks in the catalog.
            wrap: Whether a new cycle may start once the current one is used up.

        Returns:
            An index in [0, size), or None when the cycle is exhausted and
            wrapping is not allowed.
        """
        if size <= 0:
            return None
        if size != self._size:
            # Indices shifted under us; any remaining order is meaningless.
            self.reset()
            self._size = size
        if current in self._remaining:
            # Picked by hand mid-cycle; it has had its turn.
            self._remaining.remove(current)
            self._exhausted = not self._remaining

        if not self._remaining:
            if self._exhausted and not wrap:
                return None
            self._remaining = [i for i in range(size) if i != current]
            self._rng.shuffle(self._remaining)
            self._exhausted = False
            log.debug(f"Started shuffle cycle over {size} tracks.")
            if not self._remaining:
                return current if wrap else None

        index = self._remaining.pop()
        if not self._remaining:
            self._exhausted = True
        return index
