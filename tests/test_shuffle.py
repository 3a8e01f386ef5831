"""Tests for ShuffleCycle."""

import random

from warfront_audio.utils.shuffle import ShuffleCycle


class TestShuffleCycle:
    """Test shuffle ordering."""

    def test_cycle_covers_all_other_tracks(self) -> None:
        cycle = ShuffleCycle(random.Random(42))
        current = 2
        seen = []
        for _ in range(5):
            current = cycle.next_index(current, 6)
            seen.append(current)
        assert sorted(seen) == [0, 1, 3, 4, 5]

    def test_exhausted_without_wrap_holds(self) -> None:
        cycle = ShuffleCycle(random.Random(1))
        current = 0
        for _ in range(3):
            current = cycle.next_index(current, 4, wrap=False)
            assert current is not None
        assert cycle.next_index(current, 4, wrap=False) is None

    def test_wrap_starts_new_cycle(self) -> None:
        cycle = ShuffleCycle(random.Random(5))
        current = 0
        for _ in range(10):
            nxt = cycle.next_index(current, 3)
            assert nxt is not None and nxt != current
            current = nxt

    def test_size_change_restarts(self) -> None:
        cycle = ShuffleCycle(random.Random(9))
        cycle.next_index(0, 5)
        assert cycle.next_index(0, 2) == 1

    def test_single_track(self) -> None:
        cycle = ShuffleCycle()
        assert cycle.next_index(0, 1) == 0
        cycle.reset()
        assert cycle.next_index(0, 1, wrap=False) is None

    def test_empty(self) -> None:
        assert ShuffleCycle().next_index(0, 0) is None
