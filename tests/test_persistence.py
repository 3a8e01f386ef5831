"""Tests for snapshot persistence."""

import json

import pytest
from conftest import FakeDevice, make_track

from warfront_audio.core.orchestrator import AudioOrchestrator
from warfront_audio.exceptions import PersistenceError
from warfront_audio.models.settings import RepeatMode
from warfront_audio.storage.kv_store import MemoryStore
from warfront_audio.storage.persistence import DEFAULT_STORAGE_KEY, PersistenceSync

BROWSER_SNAPSHOT = {
    "musicTracks": [
        {
            "id": "1712345678901",
            "title": "War Drums",
            "artist": "",
            "url": "https://cdn.example.com/drums.mp3",
            "duration": 0,
            "uploadedBy": "admin",
            "uploadedAt": "2024-04-05T18:21:18.901Z",
            "isActive": True,
        },
        {
            "id": "1712345678902",
            "title": "March of Legions",
            "artist": "Imperial Band",
            "url": "https://cdn.example.com/march.mp3",
            "duration": 184.5,
            "uploadedBy": "admin",
            "uploadedAt": "2024-04-05T18:25:00.000Z",
            "isActive": True,
        },
    ],
    "musicSettings": {
        "isEnabled": True,
        "autoPlay": False,
        "volume": 0.3,
        "shuffle": True,
        "repeat": "one",
    },
    "alertSettings": {
        "isEnabled": True,
        "alertSoundUrl": "https://cdn.example.com/siren.mp3",
        "volume": 0.9,
        "showVisualAlert": False,
        "alertDuration": 8,
    },
    "currentTrackIndex": 1,
}


class FailingStore:
    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def engine(store: MemoryStore) -> AudioOrchestrator:
    return AudioOrchestrator(FakeDevice(), FakeDevice(), store)


def saved(store: MemoryStore) -> dict:
    return json.loads(store.data[DEFAULT_STORAGE_KEY])


class TestSnapshot:
    """Test what gets written."""

    def test_snapshot_layout(self, engine: AudioOrchestrator) -> None:
        engine.add_track(make_track("a"))
        data = json.loads(engine.persistence.dumps())
        assert set(data) == {
            "musicTracks",
            "musicSettings",
            "alertSettings",
            "currentTrackIndex",
        }
        assert data["musicTracks"][0]["uploadedBy"] == "admin"
        assert data["musicSettings"]["repeat"] == "all"
        assert data["alertSettings"]["alertDuration"] == 5

    def test_changes_are_saved(
        self, engine: AudioOrchestrator, store: MemoryStore
    ) -> None:
        engine.add_track(make_track("a"))
        assert [t["id"] for t in saved(store)["musicTracks"]] == ["ta"]

        engine.update_music_settings(volume=0.7)
        assert saved(store)["musicSettings"]["volume"] == 0.7

        engine.update_alert_settings(alert_duration=9)
        assert saved(store)["alertSettings"]["alertDuration"] == 9

        engine.remove_track("ta")
        assert saved(store)["musicTracks"] == []

    def test_playback_flags_not_saved(self, engine: AudioOrchestrator) -> None:
        data = json.loads(engine.persistence.dumps())
        assert "isPlaying" not in data
        assert "isLoading" not in data

    def test_save_failure_is_swallowed(self) -> None:
        engine = AudioOrchestrator(FakeDevice(), FakeDevice(), FailingStore())
        engine.add_track(make_track("a"))
        assert len(engine.tracks) == 1
        assert engine.persistence.save() is False

    def test_paused_writes(self, engine: AudioOrchestrator, store: MemoryStore) -> None:
        with engine.persistence.paused_writes():
            engine.add_track(make_track("a"))
            assert DEFAULT_STORAGE_KEY not in store.data
        assert engine.persistence.save() is True
        assert len(saved(store)["musicTracks"]) == 1


class TestRestore:
    """Test reading snapshots back."""

    def test_restore_browser_snapshot(self, engine: AudioOrchestrator) -> None:
        engine.restore(json.dumps(BROWSER_SNAPSHOT))

        assert [t.title for t in engine.tracks] == ["War Drums", "March of Legions"]
        assert engine.tracks[0].artist == "Unknown"
        assert engine.music_settings.volume == 0.3
        assert engine.music_settings.repeat is RepeatMode.ONE
        assert engine.alert_settings.alert_duration == 8
        assert engine.alert_settings.show_visual_alert is False
        assert engine.playback_state.current_track_index == 1
        assert engine.playback_state.is_playing is False

    def test_round_trip(self, store: MemoryStore) -> None:
        first = AudioOrchestrator(FakeDevice(), FakeDevice(), store)
        first.restore(json.dumps(BROWSER_SNAPSHOT))

        second = AudioOrchestrator(FakeDevice(), FakeDevice(), store)
        assert second.persistence.load() is True
        assert second.snapshot() == first.snapshot()

    def test_unknown_fields_ignored_and_missing_defaulted(
        self, engine: AudioOrchestrator
    ) -> None:
        blob = json.dumps({"musicSettings": {"volume": 0.1}, "theme": "dark"})
        engine.restore(blob)
        assert engine.music_settings.volume == 0.1
        assert engine.music_settings.repeat is RepeatMode.ALL
        assert engine.tracks == []
        assert engine.alert_settings.alert_duration == 5

    def test_out_of_range_index_clamped(self, engine: AudioOrchestrator) -> None:
        data = dict(BROWSER_SNAPSHOT, currentTrackIndex=17)
        engine.restore(json.dumps(data))
        assert engine.playback_state.current_track_index == 0

    def test_restore_rewrites_store(
        self, engine: AudioOrchestrator, store: MemoryStore
    ) -> None:
        engine.restore(json.dumps(BROWSER_SNAPSHOT))
        assert saved(store)["currentTrackIndex"] == 1
        assert len(saved(store)["musicTracks"]) == 2

    def test_load_with_nothing_saved(self, engine: AudioOrchestrator) -> None:
        assert engine.persistence.load() is False

    @pytest.mark.parametrize(
        "blob",
        [
            "{not json",
            pytest.param("[" * 100000 + "]" * 100000, id="deeply-nested"),
            "[1, 2, 3]",
            '"just a string"',
            json.dumps({"musicSettings": {"repeat": "sometimes"}}),
            json.dumps({"musicTracks": [{"title": "No url"}]}),
            json.dumps({"currentTrackIndex": "first"}),
            json.dumps(
                {
                    "musicTracks": [
                        {"id": "1", "title": "A", "url": "https://x.example/a.mp3"},
                        {"id": "1", "title": "B", "url": "https://x.example/b.mp3"},
                    ]
                }
            ),
        ],
    )
    def test_corrupt_snapshot_leaves_state_unchanged(
        self, engine: AudioOrchestrator, blob: str
    ) -> None:
        engine.add_track(make_track("a"))
        engine.update_music_settings(volume=0.2)
        before = engine.snapshot()

        with pytest.raises(PersistenceError):
            engine.restore(blob)

        assert engine.snapshot() == before

    def test_restore_inline_and_blob_sources(self, engine: AudioOrchestrator) -> None:
        """Test that tracks uploaded as data: or blob: URIs survive a restore."""
        data = json.loads(json.dumps(BROWSER_SNAPSHOT))
        data["musicTracks"][0]["url"] = "data:audio/mpeg;base64,AAAA"
        data["musicTracks"][1]["url"] = "blob:https://game.example.com/5d1c0c"
        engine.restore(json.dumps(data))
        assert [t.url for t in engine.tracks] == [
            "data:audio/mpeg;base64,AAAA",
            "blob:https://game.example.com/5d1c0c",
        ]
        assert engine.music_settings.volume == 0.3

    def test_parse_deeply_nested_blob(self) -> None:
        with pytest.raises(PersistenceError):
            PersistenceSync.parse("[" * 100000 + "]" * 100000)

    def test_parse_accepts_bytes(self) -> None:
        snapshot = PersistenceSync.parse(json.dumps(BROWSER_SNAPSHOT).encode())
        assert len(snapshot.music_tracks) == 2
