# ==============================================================================
# Listeners Command
# ==============================================================================
"""
Listener report command for the listenstats CLI.

Runs the same report as the HTTP action against the PostgreSQL listener store
and writes JSON to stdout or a CSV file to disk.
"""

import json
import shutil
from pathlib import Path
from typing import Annotated, Optional

import typer

from listenstats.cli.shared import C, I, setup_logging
from listenstats.core.exceptions import ListenerReportError
from listenstats.infrastructure import (
    GeoIP2Locator,
    PostgreSQLListenerRepository,
    UserAgentClassifier,
)
from listenstats.report import ListenersReport
from listenstats.utils.config import get_settings


def _fail(message: str) -> None:
    typer.echo(f"{C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}", err=True)
    raise typer.Exit(1)


# ==============================================================================
# Commands
# ==============================================================================


def listeners_report(
    station: Annotated[str, typer.Argument(help="Station short name")],
    start: Annotated[
        Optional[str],
        typer.Option("--start", "-s", help="Start date/time (station time); omit for live"),
    ] = None,
    end: Annotated[
        Optional[str],
        typer.Option("--end", "-e", help="End date/time (station time); defaults to --start"),
    ] = None,
    unique: Annotated[
        bool,
        typer.Option("--unique/--no-unique", help="Merge reconnects of the same listener"),
    ] = True,
    fmt: Annotated[str, typer.Option("--format", "-f", help="Output format: json or csv")] = "json",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="CSV destination (defaults to the download name)"),
    ] = None,
    locale: Annotated[
        Optional[str], typer.Option("--locale", "-l", help="Locale for place names")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Report a station's listeners, live or for a time range.

    Examples:
        listenstats listeners mystation                          # Live, JSON
        listenstats listeners mystation -s 2024-05-01 -e 2024-05-01T23:59
        listenstats listeners mystation -s 2024-05-01 -f csv -o may1.csv
        listenstats listeners mystation --no-unique              # Every connection
    """
    setup_logging(verbose)
    settings = get_settings()

    params = {"format": fmt, "unique": "true" if unique else "false"}
    if start:
        params["start"] = start
    if end:
        params["end"] = end

    geolocator = GeoIP2Locator(settings.geoip.database_path)
    try:
        with PostgreSQLListenerRepository(settings) as repo:
            found = repo.get_station(station)
            if found is None:
                _fail(f"Station '{station}' not found")

            report = ListenersReport(
                listeners=repo,
                names=repo,
                classifier=UserAgentClassifier(),
                geolocator=geolocator,
                settings=settings,
            )
            response = report.handle(found, params, locale=locale)
    except ListenerReportError as e:
        _fail(str(e))
    finally:
        geolocator.close()

    if response.status_code != 200:
        _fail(response.body["message"])

    if not response.is_download:
        typer.echo(json.dumps(response.body, indent=2))
        return

    download = response.download
    destination = output or Path.cwd() / download.filename
    shutil.move(str(download.path), destination)
    typer.echo(f"{C.BRIGHT_GREEN}{I.CHECK} Wrote {destination}{C.RESET}", err=True)
