# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the studio analytics CLI.
"""

import json
from typing import Annotated

import typer

from studio_analytics.cli.shared import C
from studio_analytics.utils.config import get_settings


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    if json_output:
        config = {
            "storage": {
                "backend": settings.storage.backend,
            },
            "sqlite": {
                "path": str(settings.sqlite.path),
            },
            "postgresql": {
                "host": settings.postgres.host,
                "port": settings.postgres.port,
                "database": settings.postgres.database,
                "schema": settings.postgres.schema_name,
                "user": settings.postgres.user,
                "password": settings.postgres.password,
                "sslmode": settings.postgres.sslmode,
            },
            "server": {
                "host": settings.server.host,
                "port": settings.server.port,
                "cors_origins": settings.server.cors_origins,
            },
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Storage{C.RESET}")
    print(f"  Backend:    {C.WHITE}{settings.storage.backend}{C.RESET}")
    if settings.storage.backend == "postgres":
        print(f"  Host:       {C.WHITE}{settings.postgres.host}:{settings.postgres.port}{C.RESET}")
        print(f"  Database:   {C.WHITE}{settings.postgres.database}{C.RESET}")
        print(f"  Schema:     {C.WHITE}{settings.postgres.schema_name}{C.RESET}")
        print(f"  SSL mode:   {C.WHITE}{settings.postgres.sslmode}{C.RESET}")
    else:
        print(f"  Path:       {C.WHITE}{settings.sqlite.path}{C.RESET}")
    print()

    print(f"{C.CYAN}Server{C.RESET}")
    print(f"  Listen:     {C.WHITE}{settings.server.host}:{settings.server.port}{C.RESET}")
    print(f"  CORS:       {C.WHITE}{', '.join(settings.server.cors_origins)}{C.RESET}")
    print()

    print(f"{C.CYAN}Logging{C.RESET}")
    print(f"  Level:      {C.WHITE}{settings.log_level}{C.RESET}")
    print()
