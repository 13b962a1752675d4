# ==============================================================================
# Database Commands
# ==============================================================================
"""
Schema commands for the studio analytics CLI.
"""

import typer

from studio_analytics.cli.shared import C, print_error, print_success
from studio_analytics.utils.config import get_settings
from studio_analytics.utils.db import check_db_connection, init_schema
from studio_analytics.utils.log import setup_logging


def db_init() -> None:
    """Create the analytics tables for the configured backend.

    Safe to run repeatedly; existing tables are left untouched.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    print()
    print(f"  Initializing {C.WHITE}{settings.describe_storage()}{C.RESET}...")
    try:
        init_schema(settings)
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success("Tables ready")
    print()


def db_check() -> None:
    """Check that the configured backend is reachable."""
    settings = get_settings()
    if not check_db_connection(settings):
        print_error(f"Cannot connect to {settings.describe_storage()}")
        raise typer.Exit(1)
    print_success(f"Connected to {settings.describe_storage()}")
