# ==============================================================================
# Studio Analytics CLI
# ==============================================================================
"""
Command-line interface for studio website analytics.

Usage:
    studio-analytics --help
    studio-analytics funnel --start 2025-01-01
    studio-analytics summary --json
    studio-analytics serve --port 3001
    studio-analytics db init
    studio-analytics data load events.json
    studio-analytics data delete-session SESSION_ID
    studio-analytics data clear -y
    studio-analytics config show
"""

import os

import typer

# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="studio-analytics",
    help="Studio website analytics and funnel reporting CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Report commands are imported from studio_analytics.cli.analytics
from studio_analytics.cli.analytics import show_funnel, show_summary

app.command("funnel")(show_funnel)
app.command("summary")(show_summary)

# Server command is imported from studio_analytics.cli.server
from studio_analytics.cli.server import serve

app.command("serve")(serve)

db_app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")

from studio_analytics.cli.db import db_check, db_init

db_app.command("init")(db_init)
db_app.command("check")(db_check)

data_app = typer.Typer(
    help="Data management operations",
    no_args_is_help=True,
)
app.add_typer(data_app, name="data")

from studio_analytics.cli.data import data_clear, data_delete_session, data_load

data_app.command("load")(data_load)
data_app.command("delete-session")(data_delete_session)
data_app.command("clear")(data_clear)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from studio_analytics.cli.config import config_show

config_app.command("show")(config_show)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
