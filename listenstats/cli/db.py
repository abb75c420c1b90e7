# ==============================================================================
# Database Commands
# ==============================================================================
"""
Database commands for the listenstats CLI.
"""

import typer

from listenstats.cli.shared import C, I, setup_logging
from listenstats.utils.config import get_settings
from listenstats.utils.db import check_db_connection, ensure_schema


def db_init() -> None:
    """Create the listener store schema if it does not exist.

    Examples:
        listenstats db init
    """
    setup_logging()
    settings = get_settings()
    schema = settings.postgres.schema_name

    if not check_db_connection(settings):
        typer.echo(f"{C.BRIGHT_RED}{I.CROSS} Cannot connect to PostgreSQL{C.RESET}")
        raise typer.Exit(1)

    try:
        created = ensure_schema(settings)
    except Exception as e:
        typer.echo(f"{C.BRIGHT_RED}{I.CROSS} Failed to initialize schema: {e}{C.RESET}")
        raise typer.Exit(1)

    if created:
        typer.echo(f"{C.BRIGHT_GREEN}{I.CHECK} Schema '{schema}' created{C.RESET}")
    else:
        typer.echo(f"{C.BRIGHT_GREEN}{I.CHECK} Schema '{schema}' already exists{C.RESET}")
