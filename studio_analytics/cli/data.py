# ==============================================================================
# Data Commands
# ==============================================================================
"""
Data management commands for the studio analytics CLI.

Commands for loading exported events and deleting stored data.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from pydantic import TypeAdapter, ValidationError

from studio_analytics.cli.shared import C, open_service, print_error, print_success
from studio_analytics.core.models import AnalyticsEvent

_events_adapter = TypeAdapter(list[AnalyticsEvent])


def load_events_file(path: Path) -> list[AnalyticsEvent]:
    """
    Read a JSON file holding one event object or an array of events.

    Raises:
        ValueError: If the file is not valid JSON or an event fails validation
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e

    if isinstance(payload, dict):
        payload = [payload]
    try:
        return _events_adapter.validate_python(payload)
    except ValidationError as e:
        raise ValueError(f"{path} contains invalid events: {e}") from e


# ==============================================================================
# Commands
# ==============================================================================


def data_load(
    path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON file of events"),
    ],
) -> None:
    """Load events from a JSON file (one event or an array).

    Session rows are created for every session_start event, as with the
    HTTP ingestion endpoint.

    Examples:
        studio-analytics data load export.json
    """
    try:
        events = load_events_file(path)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    with open_service() as service:
        try:
            saved = service.record(events)
        except Exception as e:
            print_error(f"Failed to store events: {e}")
            raise typer.Exit(1)

    print_success(f"Loaded {C.WHITE}{saved:,}{C.RESET}{C.BRIGHT_GREEN} events from {path}")


def data_delete_session(
    session_id: Annotated[str, typer.Argument(help="Session to delete")],
) -> None:
    """Delete one session and all of its events."""
    with open_service() as service:
        try:
            service.delete_session(session_id)
        except Exception as e:
            print_error(f"Failed to delete session: {e}")
            raise typer.Exit(1)

    print_success(f"Session {session_id} deleted")


def data_clear(
    confirm: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Delete all stored sessions and events.

    Examples:
        studio-analytics data clear       # With confirmation prompt
        studio-analytics data clear -y    # Skip confirmation
    """
    if not confirm:
        typer.confirm(
            "This will DELETE all analytics data. This cannot be undone. Are you sure?",
            abort=True,
        )

    with open_service() as service:
        try:
            result = service.clear()
        except Exception as e:
            print_error(f"Failed to clear data: {e}")
            raise typer.Exit(1)

    print_success(
        f"Deleted {result['eventsDeleted']:,} events and {result['sessionsDeleted']:,} sessions"
    )
