"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Iterable

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from radiko_cli.program.models import AreaStations, ProgramEntry, ProgramSearchResult
from radiko_cli.utils.formatting import format_duration, format_time_range

HIDDEN_KEYS = ("password",)


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "HttpError": [
            "• radiko rejected the request; check the status code above.",
            "• A 401/403 on login means the mail address or password is wrong.",
            "• Timefree programs are only available for about a week.",
        ],
        "ResponseError": [
            "• radiko answered with unexpected content.",
            "• The web player protocol may have changed; update radiko-cli.",
        ],
        "DownloadError": [
            "• ffmpeg could not record the stream, see its message above.",
            "• Programs outside your area need a premium login (`radiko-cli init`).",
            "• Check that the time range matches a broadcast slot.",
        ],
        "FileNotFoundError": [
            "• ffmpeg was not found. Install it or set `ffmpeg_dir` in the config.",
        ],
        "ConfigurationError": [
            "• Run `radiko-cli init --force` to recreate the configuration.",
        ],
        "ClientConnectorError": [
            "• A network connection issue occurred.",
            "• radiko might be temporarily unavailable.",
        ],
        "TimeoutError": [
            "• A request timed out; check your internet connection.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        if key in HIDDEN_KEYS and value:
            value = "********"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_stations_table(area_stations: AreaStations):
    """Displays the stations of one area."""
    console = Console()
    table = Table(
        title=f"Stations in {area_stations.area_name or ''} ({area_stations.area_id or '?'})",
        box=box.SIMPLE,
    )
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Timefree", justify="center")
    table.add_column("Areafree", justify="center")

    for station in area_stations.stations:
        table.add_row(
            station.station_id,
            station.station_name or "",
            "✓" if station.supports_timefree else "✗",
            "✓" if station.areafree == 1 else "✗",
        )
    console.print(table)


def print_schedule_table(title: str, programs: Iterable[ProgramEntry]):
    """Displays a list of program entries."""
    console = Console()
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Start", style="cyan", no_wrap=True)
    table.add_column("Duration", justify="right")
    table.add_column("Title")
    table.add_column("Performer", style="dim")

    for program in programs:
        if program.ft is None or program.to is None:
            continue
        duration = (program.to - program.ft).total_seconds()
        table.add_row(
            f"{program.ft:%Y%m%d%H%M}",
            format_duration(duration),
            program.title or "",
            program.pfm or "",
        )
    console.print(table)


def print_search_results(keyword: str, result: ProgramSearchResult):
    """Displays one page of search results."""
    console = Console()
    meta = result.meta
    total = meta.result_count if meta else len(result.programs)
    page = meta.page_idx if meta else 0

    table = Table(
        title=f"Search '{keyword}': {total} result(s), page {page}", box=box.SIMPLE
    )
    table.add_column("Station", style="cyan")
    table.add_column("Slot", no_wrap=True)
    table.add_column("Title")
    table.add_column("Status", style="dim")

    for program in result.programs:
        slot = ""
        if program.start_time and program.end_time:
            slot = format_time_range(program.start_time, program.end_time)
        table.add_row(
            program.station_id or "",
            slot,
            program.title or "",
            program.status or "",
        )
    console.print(table)
