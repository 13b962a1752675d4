# ==============================================================================
# Server Command
# ==============================================================================
"""
Runs the analytics HTTP API with uvicorn.
"""

from typing import Annotated, Optional

import typer

from studio_analytics.utils.config import get_settings
from studio_analytics.utils.log import setup_logging


def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Listen port")] = None,
) -> None:
    """Start the analytics API server.

    Tables are created on startup if they don't exist yet.

    Examples:
        studio-analytics serve
        studio-analytics serve --port 8080
    """
    import uvicorn

    from studio_analytics.api.server import create_app

    settings = get_settings()
    setup_logging(settings.log_level)

    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_level=settings.log_level.lower(),
    )
