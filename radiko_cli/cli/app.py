"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from radiko_cli import __version__
from radiko_cli.api.auth import RadikoAuthenticator
from radiko_cli.api.http import RadikoHttpClient
from radiko_cli.exceptions import (
    ConfigurationError,
    FileIntegrityError,
    RadikoCliError,
)
from radiko_cli.media.downloader import RadikoDownloader, get_cover_codec
from radiko_cli.media.ffmpeg import FFmpegFactory
from radiko_cli.media.integrity import FileIntegrityChecker
from radiko_cli.models.config import AppConfig
from radiko_cli.program.area import AreaPrefecture, AreaService
from radiko_cli.program.schedule import ProgramScheduleService
from radiko_cli.program.search import ProgramSearchService, ProgramTimeRangeFilter
from radiko_cli.program.station import StationService
from radiko_cli.storage.config_manager import ConfigManager
from radiko_cli.utils.formatting import format_duration, parse_timestamp
from radiko_cli.utils.path import PathFormatter, create_dir

from .formatters import (
    print_config,
    print_schedule_table,
    print_search_results,
    print_stations_table,
)
from .progress_manager import ProgressManager

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
log = logging.getLogger("radiko_cli")

app = typer.Typer(
    name="radiko-cli",
    help=(
        "Record radiko timefree programs with ffmpeg. Use 'radiko-cli"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

TIME_FILTERS = {
    "past": ProgramTimeRangeFilter.PAST,
    "future": ProgramTimeRangeFilter.FUTURE,
    "all": ProgramTimeRangeFilter.ALL,
}


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "radiko-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> AppConfig:
    """Loads the config file, or the defaults when `init` has not been run."""
    if CONFIG_FILE.is_file():
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    log.debug(f"No config file at '{CONFIG_FILE}', using defaults.")
    try:
        return AppConfig(**(cli_options or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration:\n{e}") from e


def _verify_recording(path: Path, cover_embedded: bool) -> None:
    """Checks a finished recording; a missing cover only warns."""
    if not FileIntegrityChecker.check_audio(str(path)):
        raise FileIntegrityError(f"Recorded file failed verification: {path}")
    if cover_embedded and not FileIntegrityChecker.has_cover(str(path)):
        log.warning(f"[yellow]Cover art was not embedded in '{path}'.[/yellow]")


def _parse_area(area_id: str | None) -> AreaPrefecture | None:
    if area_id is None:
        return None
    area = AreaPrefecture.from_area_id(area_id.upper())
    if area is None:
        raise typer.BadParameter(f"Unknown area id: {area_id} (expected JP1..JP47)")
    return area


def _parse_time(value: str, name: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise typer.BadParameter(f"{name}: {e}") from e


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
    """radiko timefree recorder CLI"""
    if version:
        console.print(f"[bold]radiko-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("radiko_cli").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]radiko-cli init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config_manager = ConfigManager(CONFIG_FILE)
        print_config(CONFIG_FILE, config_manager.get_raw_config())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    credentials: list[str] | None = typer.Argument(  # noqa: B008
        None,
        help="Premium member mail address and password (optional).",
        metavar="[MAIL PASSWORD]",
    ),
    ffmpeg_dir: str | None = typer.Option(
        None, "--ffmpeg-dir", help="Directory containing the ffmpeg executable."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize the configuration, optionally with premium credentials."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    credentials = credentials or []
    if len(credentials) not in (0, 2):
        console.print(
            "[red]✗ Invalid credentials provided. Use a mail address + password"
            " or nothing.[/red]"
        )
        raise typer.Exit(code=1)

    settings: dict = {}
    if ffmpeg_dir:
        settings["ffmpeg_dir"] = ffmpeg_dir

    async def _verify_login(mail: str, password: str):
        async with RadikoHttpClient() as http_client:
            authenticator = RadikoAuthenticator(http_client)
            await authenticator.login(mail, password)
            await authenticator.logout()

    if credentials:
        mail, password = credentials
        console.print("\n[cyan]Verifying premium credentials...[/cyan]")
        try:
            asyncio.run(_verify_login(mail, password))
        except RadikoCliError as e:
            console.print(f"[red]✗ Login failed: {e}[/red]")
            raise typer.Exit(code=1) from e
        settings.update(mail=mail, password=password)
        console.print("[green]✓ Logged in successfully.[/green]")
    else:
        console.print("[green]✓ Using the free service (current area only).[/green]")

    ConfigManager(CONFIG_FILE).save_new_config(settings)
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print(
        "Ready to record! Try: [cyan]radiko-cli download <STATION> <START>[/cyan]"
    )


@app.command()
def area():
    """Show the area radiko assigns to this connection."""
    config = _load_config()

    async def _area_async():
        async with RadikoHttpClient(timeout=config.http_timeout) as http_client:
            return await AreaService(http_client).get_current_area()

    current = asyncio.run(_area_async())
    console.print(
        f"Current area: [cyan]{current.area_id}[/cyan] ({current.kanji_name})"
    )


@app.command()
def stations(
    area_id: str | None = typer.Argument(
        None, help="Area id such as JP13 (default: current area)."
    ),
):
    """List the stations of an area."""
    config = _load_config()
    target = _parse_area(area_id)

    async def _stations_async():
        async with RadikoHttpClient(timeout=config.http_timeout) as http_client:
            area_ = target or await AreaService(http_client).get_current_area()
            return await StationService(http_client).get_stations(area_)

    print_stations_table(asyncio.run(_stations_async()))


@app.command()
def schedule(
    station_id: str = typer.Argument(..., help="Station id, e.g. TBS."),
    day: str | None = typer.Option(
        None, "--date", help="Show the daily schedule of YYYYMMDD instead of the week."
    ),
    area_id: str | None = typer.Option(
        None, "--area", help="Area for the daily schedule (default: current area)."
    ),
):
    """Show the program schedule of a station."""
    config = _load_config()
    target = _parse_area(area_id)
    broadcast_date = None
    if day is not None:
        try:
            broadcast_date = datetime.strptime(day, "%Y%m%d").date()
        except ValueError as e:
            raise typer.BadParameter(f"--date: {e}") from e

    async def _schedule_async():
        async with RadikoHttpClient(timeout=config.http_timeout) as http_client:
            service = ProgramScheduleService(http_client)
            if broadcast_date is None:
                return await service.get_weekly_schedule(station_id)
            area_ = target or await AreaService(http_client).get_current_area()
            return await service.get_daily_schedule(area_, broadcast_date)

    station_schedule = asyncio.run(_schedule_async()).for_station(station_id)
    if station_schedule is None:
        console.print(f"[yellow]No schedule found for station {station_id}.[/yellow]")
        raise typer.Exit(code=1)

    title = f"{station_schedule.station_name or station_id} ({station_id})"
    print_schedule_table(title, station_schedule.iter_programs())


@app.command()
def search(
    keyword: str = typer.Argument(..., help="Search words."),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Zero-based page."),
    time_filter: str = typer.Option(
        "all", "--filter", help="Restrict results: past, future or all."
    ),
    all_regions: bool | None = typer.Option(
        None,
        "--all-regions/--current-region",
        help="Search every region (premium members only).",
    ),
    rows: int | None = typer.Option(
        None, "--rows", help="Results per page (1-50)."
    ),
):
    """Search programs by keyword."""
    if time_filter.lower() not in TIME_FILTERS:
        raise typer.BadParameter(
            f"--filter must be one of: {', '.join(TIME_FILTERS)}"
        )
    cli_options = {
        key: value
        for key, value in {"all_regions": all_regions, "row_limit": rows}.items()
        if value is not None
    }
    config = _load_config(cli_options)

    async def _search_async():
        async with RadikoHttpClient(timeout=config.http_timeout) as http_client:
            current = await AreaService(http_client).get_current_area()
            service = ProgramSearchService(
                http_client,
                current,
                time_filter=TIME_FILTERS[time_filter.lower()],
                all_regions=config.all_regions,
                row_limit=config.row_limit,
            )
            return await service.search(keyword, page_index=page)

    print_search_results(keyword, asyncio.run(_search_async()))


@app.command(name="download")
def download_command(
    station_id: str = typer.Argument(..., help="Station id, e.g. TBS."),
    start: str = typer.Argument(..., help="Start time, YYYYMMDDhhmm[ss]."),
    end: str | None = typer.Argument(
        None, help="End time. Looked up in the schedule when omitted."
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Output file (default: rendered template)."
    ),
    cover: str | None = typer.Option(
        None, "--cover", help="Image URL to embed as cover art (.jpg/.png)."
    ),
    no_cover: bool = typer.Option(
        False, "--no-cover", help="Do not embed cover art."
    ),
    ffmpeg_dir: str | None = typer.Option(
        None, "--ffmpeg-dir", help="Directory containing the ffmpeg executable."
    ),
):
    """Record a timefree program."""
    from_ = _parse_time(start, "START")
    to = _parse_time(end, "END") if end is not None else None
    if to is not None and to <= from_:
        raise typer.BadParameter("END must be after START.")

    cli_options = {"ffmpeg_dir": ffmpeg_dir} if ffmpeg_dir else None
    config = _load_config(cli_options)

    async def _download_async() -> tuple[Path, str | None]:
        async with RadikoHttpClient(timeout=config.http_timeout) as http_client:
            to_, title, cover_url = to, None, cover
            if to_ is None:
                weekly = await ProgramScheduleService(http_client).get_weekly_schedule(
                    station_id
                )
                station_schedule = weekly.for_station(station_id)
                program = station_schedule and station_schedule.find_program(from_)
                if not program or program.to is None:
                    raise typer.BadParameter(
                        f"No program of {station_id} starts at {from_:%Y%m%d%H%M}."
                        " Pass END explicitly."
                    )
                to_, title = program.to, program.title
                cover_url = cover_url or program.img
                log.info(f"Found program: [bold]{title}[/bold]")

            if no_cover or not config.embed_cover:
                cover_url = None

            if output is not None:
                output_path = output
            else:
                formatter = PathFormatter(config.output_template)
                output_path = Path(config.output_dir) / formatter.format_path(
                    station_id, from_, to_, title, config.extension
                )
            create_dir(output_path.parent)

            authenticator = RadikoAuthenticator(
                http_client, config.reauthentication_interval
            )
            ffmpeg_path = Path(config.ffmpeg_dir) if config.ffmpeg_dir else None
            downloader = RadikoDownloader(authenticator, FFmpegFactory(ffmpeg_path))

            if config.has_credentials:
                await authenticator.login(config.mail, config.password)
                log.info("[green]✓ Logged in as premium member.[/green]")
            try:
                duration = (to_ - from_).total_seconds()
                with ProgressManager(console) as progress_manager:
                    progress_manager.start_recording(
                        f"{station_id} {format_duration(duration)}", duration
                    )
                    written = await downloader.download(
                        station_id,
                        from_,
                        to_,
                        output_path,
                        cover_url=cover_url,
                        progress_callback=progress_manager.update,
                    )
                    return written, cover_url
            finally:
                if authenticator.is_logged_in():
                    try:
                        await authenticator.logout()
                    except RadikoCliError as e:
                        log.warning(f"[yellow]Logout failed: {e}[/yellow]")

    written, cover_url = asyncio.run(_download_async())

    if config.verify_output:
        _verify_recording(written, get_cover_codec(cover_url) is not None)
        console.print("[green]✓ Recorded file verified.[/green]")
    console.print(f"[bold green]✓ Saved to '{written}'[/bold green]")
