# ==============================================================================
# Listenstats CLI
# ==============================================================================
"""
Command-line interface for station listener reports.

Usage:
    listenstats --help
    listenstats listeners mystation
    listenstats listeners mystation --start 2024-05-01 --format csv
    listenstats config show
    listenstats db init
    listenstats status
"""

import os

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="listenstats",
    help="Station listener reports",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Listener report
from listenstats.cli.listeners import listeners_report

app.command("listeners")(listeners_report)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from listenstats.cli.config import config_show

config_app.command("show")(config_show)

db_app = typer.Typer(
    help="Listener store database operations",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")

from listenstats.cli.db import db_init

db_app.command("init")(db_init)

# Status command is imported from listenstats.cli.status
from listenstats.cli.status import show_status

app.command("status")(show_status)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
