# ==============================================================================
# Status Command
# ==============================================================================
"""
Status command for the listenstats CLI.

Shows whether the listener store and the GeoIP database are usable, as a
formatted box or as JSON.
"""

import json
from typing import Annotated, Any

import typer

from listenstats.cli.shared import render_box, status_badge
from listenstats.utils.config import get_settings
from listenstats.utils.db import check_db_connection, check_schema_exists


def collect_status() -> dict[str, Any]:
    """Collect service status data."""
    settings = get_settings()
    db_ok = check_db_connection(settings)
    return {
        "postgresql": {
            "reachable": db_ok,
            "schema": settings.postgres.schema_name,
            "schema_ready": db_ok and check_schema_exists(settings),
        },
        "geoip": {
            "configured": settings.geoip.is_configured,
            "database_path": (
                str(settings.geoip.database_path) if settings.geoip.database_path else None
            ),
        },
    }


def show_status(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Show listener store and GeoIP status."""
    status = collect_status()

    if json_output:
        typer.echo(json.dumps(status, indent=2))
        return

    pg = status["postgresql"]
    geoip = status["geoip"]

    reachable = status_badge("reachable" if pg["reachable"] else "unreachable", pg["reachable"])
    schema = status_badge(
        pg["schema"] if pg["schema_ready"] else f"{pg['schema']} (run 'listenstats db init')",
        pg["schema_ready"],
    )
    geo = status_badge(
        "configured" if geoip["configured"] else "not configured (locations show N/A)",
        geoip["configured"],
        is_optional=True,
    )

    typer.echo()
    for line in render_box(
        "LISTENSTATS STATUS",
        [
            ("PostgreSQL", [f"  Connection:  {reachable}", f"  Schema:      {schema}"]),
            ("GeoIP", [f"  Database:    {geo}"]),
        ],
    ):
        typer.echo(line)
    typer.echo()

    if not pg["reachable"]:
        raise typer.Exit(1)
