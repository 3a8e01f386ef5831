"""
Defines the command-line interface for the engine using Typer.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from warfront_audio import __version__
from warfront_audio.core.orchestrator import AudioOrchestrator
from warfront_audio.exceptions import WarfrontAudioError
from warfront_audio.media.device import SimulatedDevice
from warfront_audio.media.probe import probe_duration
from warfront_audio.media.stream_device import HttpStreamDevice, close_connection_pool
from warfront_audio.models.config import EngineConfig
from warfront_audio.models.track import Track, is_valid_source
from warfront_audio.storage.config_manager import ConfigManager
from warfront_audio.storage.kv_store import JsonFileStore

from .formatters import (
    format_error_with_suggestions,
    print_alert_settings,
    print_alerts,
    print_config,
    print_music_settings,
    print_playback_state,
    print_tracks_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("warfront_audio")

app = typer.Typer(
    name="warfront-audio",
    help=(
        "Background music and combat alerts for Warfront. Use 'warfront-audio"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)
tracks_app = typer.Typer(help="Manage the music catalog.")
app.add_typer(tracks_app, name="tracks")

T = TypeVar("T")


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "warfront-audio"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(overrides: dict[str, Any] | None = None) -> EngineConfig:
    return ConfigManager(CONFIG_FILE).load_config(overrides)


def _report_error(error: WarfrontAudioError) -> None:
    console.print(format_error_with_suggestions(error))


def _build_engine(config: EngineConfig) -> AudioOrchestrator:
    """Creates an orchestrator with devices and storage as configured."""
    if config.probe_sources:

        def make_device(name: str) -> SimulatedDevice:
            return HttpStreamDevice(
                name,
                load_latency=config.load_latency,
                track_length=config.default_track_length,
                request_timeout=config.request_timeout,
            )

    else:

        def make_device(name: str) -> SimulatedDevice:
            return SimulatedDevice(
                name,
                load_latency=config.load_latency,
                track_length=config.default_track_length,
            )

    return AudioOrchestrator(
        make_device("music"),
        make_device("alert"),
        JsonFileStore(Path(config.state_dir)),
        storage_key=config.storage_key,
        autoplay_delay=config.autoplay_delay,
        error_callback=_report_error,
    )


def _with_saved_state(action: Callable[[AudioOrchestrator], T]) -> T:
    """Runs a management action against the saved state, without playing anything."""
    config = _load_config()

    async def _session() -> T:
        engine = _build_engine(config)
        try:
            engine.persistence.load()
            return action(engine)
        finally:
            await engine.shutdown()
            await close_connection_pool()

    return asyncio.run(_session())


def _resolve_source(source: str) -> tuple[str, float]:
    """Turns a local path into a `file:` URI and measures it when possible."""
    if is_valid_source(source):
        return source, 0.0
    path = Path(source).expanduser()
    if not path.is_file():
        return source, 0.0
    return path.resolve().as_uri(), probe_duration(path)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Warfront Audio CLI"""
    if version:
        console.print(
            f"[bold]warfront-audio[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("warfront_audio").setLevel(log_level)

    if show_config:
        print_config(CONFIG_FILE, _load_config())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    state_dir: Path | None = typer.Option(
        None, "--state-dir", help="Where to keep the saved audio state."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Create a configuration file with default values."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings: dict[str, Any] = {}
    if state_dir is not None:
        settings["state_dir"] = str(state_dir.expanduser().resolve())
    ConfigManager(CONFIG_FILE).save_new_config(settings)
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def status():
    """Show the catalog, settings and saved playback position."""

    def _show(engine: AudioOrchestrator) -> None:
        print_tracks_table(engine.tracks, engine.playback_state.current_track_index)
        print_music_settings(engine.music_settings)
        print_alert_settings(engine.alert_settings)

    _with_saved_state(_show)


@tracks_app.command("list")
def list_tracks():
    """List the catalog in playback order."""
    _with_saved_state(
        lambda engine: print_tracks_table(
            engine.tracks, engine.playback_state.current_track_index
        )
    )


@tracks_app.command("add")
def add_track(
    title: str = typer.Argument(..., help="Track title."),
    source: str = typer.Argument(..., help="An http(s) URL or a local audio file."),
    artist: str = typer.Option("", "--artist", "-a", help="Performing artist."),
    added_by: str = typer.Option("admin", "--by", help="Who is adding the track."),
):
    """Add a track to the end of the catalog."""
    url, duration = _resolve_source(source)
    track = Track(
        title=title, artist=artist, url=url, duration=duration, uploaded_by=added_by
    )
    _with_saved_state(lambda engine: engine.add_track(track))
    console.print(f"[green]✓ Added '{track.title}' ({track.id}).[/green]")


@tracks_app.command("remove")
def remove_track(track_id: str = typer.Argument(..., help="Id of the track.")):
    """Remove a track from the catalog."""
    removed = _with_saved_state(lambda engine: engine.remove_track(track_id))
    if removed is None:
        console.print(f"[yellow]⚠️  No track with id '{track_id}'.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Removed '{removed.title}'.[/green]")


@tracks_app.command("edit")
def edit_track(
    track_id: str = typer.Argument(..., help="Id of the track."),
    title: str | None = typer.Option(None, "--title", "-t"),
    artist: str | None = typer.Option(None, "--artist", "-a"),
    source: str | None = typer.Option(None, "--source", "-s"),
):
    """Replace a track's definition. The edited track moves to the end."""

    def _edit(engine: AudioOrchestrator) -> Track | None:
        existing = engine.catalog.find(track_id)
        if existing is None:
            return None
        updates: dict[str, Any] = {"uploaded_at": datetime.now(timezone.utc)}
        if title is not None:
            updates["title"] = title
        if artist is not None:
            updates["artist"] = artist
        if source is not None:
            updates["url"], updates["duration"] = _resolve_source(source)
        return engine.edit_track(
            Track.model_validate({**existing.model_dump(), **updates})
        )

    edited = _with_saved_state(_edit)
    if edited is None:
        console.print(f"[yellow]⚠️  No track with id '{track_id}'.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Updated '{edited.title}'.[/green]")


@app.command()
def music(
    enabled: bool | None = typer.Option(None, "--enable/--disable"),
    auto_play: bool | None = typer.Option(None, "--autoplay/--no-autoplay"),
    volume: float | None = typer.Option(None, "--volume", help="0.0 to 1.0."),
    shuffle: bool | None = typer.Option(None, "--shuffle/--no-shuffle"),
    repeat: str | None = typer.Option(None, "--repeat", help="none, one or all."),
    toggle_mute: bool = typer.Option(
        False, "--toggle-mute", help="Mute, or restore the default volume."
    ),
):
    """Show or change the music settings."""
    changes = {
        key: value
        for key, value in {
            "is_enabled": enabled,
            "auto_play": auto_play,
            "volume": volume,
            "shuffle": shuffle,
            "repeat": repeat,
        }.items()
        if value is not None
    }

    def _update(engine: AudioOrchestrator):
        if changes:
            engine.update_music_settings(**changes)
        if toggle_mute:
            engine.toggle_mute()
        return engine.music_settings

    print_music_settings(_with_saved_state(_update))


@app.command()
def alerts(
    enabled: bool | None = typer.Option(None, "--enable/--disable"),
    sound: str | None = typer.Option(None, "--sound", help="Alert sound URL."),
    volume: float | None = typer.Option(None, "--volume", help="0.0 to 1.0."),
    visual: bool | None = typer.Option(None, "--visual/--no-visual"),
    duration: int | None = typer.Option(
        None, "--duration", help="Seconds an alert stays up."
    ),
):
    """Show or change the alert settings."""
    changes: dict[str, Any] = {
        key: value
        for key, value in {
            "is_enabled": enabled,
            "volume": volume,
            "show_visual_alert": visual,
            "alert_duration": duration,
        }.items()
        if value is not None
    }
    if sound is not None:
        changes["alert_sound_url"] = _resolve_source(sound)[0]

    def _update(engine: AudioOrchestrator):
        if changes:
            engine.update_alert_settings(**changes)
        return engine.alert_settings

    print_alert_settings(_with_saved_state(_update))


@app.command()
def play(
    seconds: float = typer.Option(
        30.0, "--seconds", "-t", help="How long to keep the session running."
    ),
    index: int | None = typer.Option(
        None, "--index", "-i", help="Start from this catalog position."
    ),
    probe: bool | None = typer.Option(
        None,
        "--probe/--no-probe",
        help="Verify sources over HTTP/disk before playing them.",
    ),
):
    """Run a live playback session and report state changes."""
    config = _load_config({"probe_sources": probe})

    async def _session():
        engine = _build_engine(config)
        await engine.start()
        try:
            if index is not None:
                engine.play(index)
            elif not engine.music_settings.auto_play:
                engine.play()

            loop = asyncio.get_running_loop()
            deadline = loop.time() + seconds
            last = None
            while loop.time() < deadline:
                state = engine.playback_state
                if (state.status, state.current_track_index) != last:
                    print_playback_state(state, engine.current_track)
                    last = (state.status, state.current_track_index)
                await asyncio.sleep(0.25)
        finally:
            await engine.shutdown()
            await close_connection_pool()

    try:
        asyncio.run(_session())
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Session stopped.[/yellow]")


@app.command()
def combat(
    attacker: str = typer.Argument(..., help="The attacking country."),
    defender: str = typer.Argument(..., help="The defending country."),
):
    """Raise a combat alert and wait until it expires."""
    config = _load_config()

    async def _session():
        engine = _build_engine(config)
        engine.persistence.load()
        # Restoring arms autoplay; this command only sounds the alert.
        engine.controller.cancel_autoplay()
        try:
            alert = engine.on_combat(attacker, defender)
            if alert is None:
                console.print(
                    "[yellow]⚠️  Alerts are disabled or no alert sound is "
                    "configured.[/yellow]"
                )
                raise typer.Exit(code=1)
            print_alerts(engine.visible_alerts)
            while engine.active_alerts:
                await asyncio.sleep(0.25)
            console.print("[dim]Alert expired.[/dim]")
        finally:
            await engine.shutdown()
            await close_connection_pool()

    asyncio.run(_session())
