"""
Functions for formatting and displaying engine state in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from warfront_audio.models.alert import Alert
from warfront_audio.models.config import EngineConfig
from warfront_audio.models.settings import AlertSettings, MusicSettings
from warfront_audio.models.state import PlaybackState, PlayerStatus
from warfront_audio.models.track import Track
from warfront_audio.utils.formatting import (
    format_duration,
    format_timestamp,
    format_volume,
)

STATUS_STYLES = {
    PlayerStatus.IDLE: "dim",
    PlayerStatus.STOPPED: "yellow",
    PlayerStatus.LOADING: "cyan",
    PlayerStatus.PLAYING: "bold green",
    PlayerStatus.PAUSED: "magenta",
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Run `warfront-audio init` to create a configuration file.",
            "• Use `warfront-audio init --force` to reset a broken one.",
        ],
        "ValidationError": [
            "• Volumes range from 0 to 1.",
            "• Repeat must be one of: none, one, all.",
            "• Alert duration must be at least 1 second.",
        ],
        "DuplicateIdError": [
            "• Use `warfront-audio tracks edit` to change an existing track.",
        ],
        "TrackNotFoundError": [
            "• List track ids with `warfront-audio tracks list`.",
        ],
        "PersistenceError": [
            "• The saved state file may be corrupt.",
            "• Delete it from the state directory to start fresh.",
        ],
        "DeviceError": [
            "• Check that the track URL is reachable.",
            "• Local files must be given as absolute paths.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: EngineConfig):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key in sorted(EngineConfig.get_ini_keys()):
        content += f"{key} = {getattr(config, key)}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_tracks_table(tracks: list[Track], current_index: int | None = None):
    """Displays the catalog in playback order."""
    console = Console()
    if not tracks:
        console.print("[dim]The catalog is empty.[/dim]")
        return

    table = Table(title="Music Catalog", box=box.SIMPLE_HEAVY)
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Artist")
    table.add_column("Length", justify="right")
    table.add_column("Added by", style="dim")

    for i, track in enumerate(tracks):
        marker = "▶ " if i == current_index else ""
        title = track.title if track.is_active else f"[strike]{track.title}[/strike]"
        table.add_row(
            f"{marker}{i}",
            track.id,
            title,
            track.artist,
            format_duration(track.duration),
            track.uploaded_by,
        )
    console.print(table)


def print_music_settings(settings: MusicSettings):
    """Displays the music settings record."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Enabled:", "✓ Yes" if settings.is_enabled else "✗ No")
    table.add_row("Auto-play:", "✓ Yes" if settings.auto_play else "✗ No")
    table.add_row("Volume:", format_volume(settings.volume))
    table.add_row("Shuffle:", "✓ On" if settings.shuffle else "✗ Off")
    table.add_row("Repeat:", settings.repeat.value)

    console.print(Panel(table, title="[bold]Music Settings[/bold]", border_style="blue"))


def print_alert_settings(settings: AlertSettings):
    """Displays the alert settings record."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Enabled:", "✓ Yes" if settings.is_enabled else "✗ No")
    table.add_row(
        "Sound:", settings.alert_sound_url or "[yellow]not configured[/yellow]"
    )
    table.add_row("Volume:", format_volume(settings.volume))
    table.add_row("Visual alert:", "✓ Shown" if settings.show_visual_alert else "✗ Hidden")
    table.add_row("Duration:", f"{settings.alert_duration}s")

    console.print(Panel(table, title="[bold]Alert Settings[/bold]", border_style="red"))


def print_playback_state(state: PlaybackState, track: Track | None):
    """Displays what is playing right now."""
    console = Console()
    style = STATUS_STYLES.get(state.status, "white")
    line = Text()
    line.append(f"{state.status.value.upper()}", style=style)
    if track is not None:
        line.append(f"  #{state.current_track_index} ")
        line.append(track.title, style="bold")
        line.append(f" - {track.artist}", style="dim")
    console.print(line)


def print_alerts(alerts: list[Alert]):
    """Displays the active alert queue."""
    console = Console()
    if not alerts:
        console.print("[dim]No active alerts.[/dim]")
        return
    for alert in alerts:
        console.print(
            f"[bold red]🚨 {alert.message}[/bold red] "
            f"[dim]{format_timestamp(alert.timestamp)}[/dim]"
        )
