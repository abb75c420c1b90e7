# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the listenstats CLI.
"""

import json
from typing import Annotated

import typer

from listenstats.cli.shared import C
from listenstats.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    # JSON output mode
    if json_output:
        config = {
            "postgresql": {
                "host": settings.postgres.host,
                "port": settings.postgres.port,
                "database": settings.postgres.database,
                "schema": settings.postgres.schema_name,
                "user": settings.postgres.user,
                "password": settings.postgres.password,
                "sslmode": settings.postgres.sslmode,
            },
            "geoip": {
                "database_path": (
                    str(settings.geoip.database_path) if settings.geoip.database_path else None
                ),
                "configured": settings.geoip.is_configured,
            },
            "report": {
                "batch_size": settings.report.batch_size,
                "long_execution_seconds": settings.report.long_execution_seconds,
                "default_locale": settings.report.default_locale,
                "temp_dir": str(settings.report.temp_dir) if settings.report.temp_dir else None,
            },
            "log_level": settings.log_level,
        }
        typer.echo(json.dumps(config, indent=2))
        return

    # Human-readable output
    typer.echo()
    typer.echo(f"{C.BOLD}Configuration{C.RESET}")
    typer.echo()

    # PostgreSQL
    typer.echo(f"{C.CYAN}PostgreSQL{C.RESET}")
    typer.echo(f"  Host:       {C.WHITE}{settings.postgres.host}{C.RESET}")
    typer.echo(f"  Port:       {C.WHITE}{settings.postgres.port}{C.RESET}")
    typer.echo(f"  Database:   {C.WHITE}{settings.postgres.database}{C.RESET}")
    typer.echo(f"  Schema:     {C.WHITE}{settings.postgres.schema_name}{C.RESET}")
    typer.echo(f"  User:       {C.WHITE}{settings.postgres.user}{C.RESET}")
    typer.echo(f"  SSL:        {C.WHITE}{settings.postgres.sslmode}{C.RESET}")
    typer.echo()

    # GeoIP
    typer.echo(f"{C.CYAN}GeoIP{C.RESET}")
    geoip_path = settings.geoip.database_path or "not configured"
    typer.echo(f"  Database:   {C.WHITE}{geoip_path}{C.RESET}")
    typer.echo()

    # Report
    typer.echo(f"{C.CYAN}Report{C.RESET}")
    typer.echo(f"  Batch:      {C.WHITE}{settings.report.batch_size} rows{C.RESET}")
    typer.echo(f"  Budget:     {C.WHITE}{settings.report.long_execution_seconds} seconds{C.RESET}")
    typer.echo(f"  Locale:     {C.WHITE}{settings.report.default_locale}{C.RESET}")
    temp_dir = settings.report.temp_dir or "system default"
    typer.echo(f"  Temp Dir:   {C.WHITE}{temp_dir}{C.RESET}")
    typer.echo()
