"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from warfront_audio.cli import app as cli
from warfront_audio.exceptions import ConfigurationError, ValidationError
from warfront_audio.media.device import SimulatedDevice
from warfront_audio.storage.config_manager import ConfigManager

runner = CliRunner()
ENV = {"COLUMNS": "200"}


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_dir = tmp_path / "config"
    monkeypatch.setattr(cli, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(cli, "CONFIG_FILE", config_dir / "config.ini")
    return config_dir


@pytest.fixture
def state_dir(config_home: Path, tmp_path: Path) -> Path:
    state = tmp_path / "state"
    result = runner.invoke(cli.app, ["init", "--state-dir", str(state)], env=ENV)
    assert result.exit_code == 0, result.output
    return state


def saved_state(state_dir: Path) -> dict:
    return json.loads((state_dir / "warfront_audio.json").read_text(encoding="utf-8"))


class TestCli:
    """Test the management commands."""

    def test_version(self) -> None:
        result = runner.invoke(cli.app, ["--version"], env=ENV)
        assert result.exit_code == 0
        assert "warfront-audio" in result.output

    def test_init_writes_config(self, config_home: Path, state_dir: Path) -> None:
        text = (config_home / "config.ini").read_text(encoding="utf-8")
        assert f"state_dir = {state_dir.resolve()}" in text

    def test_commands_need_config(self, config_home: Path) -> None:
        result = runner.invoke(cli.app, ["status"], env=ENV)
        assert result.exit_code != 0
        assert isinstance(result.exception, ConfigurationError)

    def test_add_and_list_tracks(self, state_dir: Path) -> None:
        result = runner.invoke(
            cli.app,
            [
                "tracks",
                "add",
                "Warhorn",
                "https://cdn.example.com/warhorn.mp3",
                "--artist",
                "Legion",
            ],
            env=ENV,
        )
        assert result.exit_code == 0, result.output

        tracks = saved_state(state_dir)["musicTracks"]
        assert [t["title"] for t in tracks] == ["Warhorn"]
        assert tracks[0]["artist"] == "Legion"

        result = runner.invoke(cli.app, ["tracks", "list"], env=ENV)
        assert result.exit_code == 0
        assert "Warhorn" in result.output

    def test_edit_track(self, state_dir: Path) -> None:
        runner.invoke(
            cli.app, ["tracks", "add", "Drums", "https://cdn.example.com/d.mp3"]
        )
        runner.invoke(
            cli.app, ["tracks", "add", "Horns", "https://cdn.example.com/h.mp3"]
        )
        track_id = saved_state(state_dir)["musicTracks"][0]["id"]

        result = runner.invoke(
            cli.app, ["tracks", "edit", track_id, "--title", "Battle Drums"], env=ENV
        )
        assert result.exit_code == 0, result.output
        titles = [t["title"] for t in saved_state(state_dir)["musicTracks"]]
        assert titles == ["Horns", "Battle Drums"]

    def test_remove_unknown_track(self, state_dir: Path) -> None:
        result = runner.invoke(cli.app, ["tracks", "remove", "missing"], env=ENV)
        assert result.exit_code == 1

    def test_music_settings(self, state_dir: Path) -> None:
        result = runner.invoke(
            cli.app, ["music", "--volume", "0.3", "--repeat", "none"], env=ENV
        )
        assert result.exit_code == 0, result.output
        music = saved_state(state_dir)["musicSettings"]
        assert music["volume"] == 0.3
        assert music["repeat"] == "none"

    def test_music_rejects_bad_repeat(self, state_dir: Path) -> None:
        result = runner.invoke(cli.app, ["music", "--repeat", "forever"], env=ENV)
        assert result.exit_code != 0
        assert isinstance(result.exception, ValidationError)

    def test_alert_settings(self, state_dir: Path) -> None:
        result = runner.invoke(
            cli.app,
            ["alerts", "--sound", "https://cdn.example.com/siren.mp3", "--duration", "3"],
            env=ENV,
        )
        assert result.exit_code == 0, result.output
        alert = saved_state(state_dir)["alertSettings"]
        assert alert["alertSoundUrl"] == "https://cdn.example.com/siren.mp3"
        assert alert["alertDuration"] == 3

    def test_combat_without_sound(self, state_dir: Path) -> None:
        result = runner.invoke(cli.app, ["combat", "Rome", "Gaul"], env=ENV)
        assert result.exit_code == 1

    def test_combat_does_not_start_music(
        self,
        config_home: Path,
        state_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that waiting for an alert never starts the background music."""
        ConfigManager(config_home / "config.ini").save_new_config(
            {"state_dir": str(state_dir), "autoplay_delay": 0.1, "load_latency": 0.0}
        )
        loads: list[tuple[str, str]] = []

        class RecordingDevice(SimulatedDevice):
            async def load(self, source: str) -> None:
                loads.append((self.name, source))
                await super().load(source)

        monkeypatch.setattr(cli, "SimulatedDevice", RecordingDevice)
        runner.invoke(
            cli.app, ["tracks", "add", "Drums", "https://cdn.example.com/d.mp3"]
        )
        runner.invoke(
            cli.app,
            ["alerts", "--sound", "https://cdn.example.com/siren.mp3", "--duration", "1"],
        )
        loads.clear()

        result = runner.invoke(cli.app, ["combat", "Rome", "Gaul"], env=ENV)
        assert result.exit_code == 0, result.output
        assert loads == [("alert", "https://cdn.example.com/siren.mp3")]
