# ==============================================================================
# Repository Factory
# ==============================================================================
"""
Factory function for creating repository instances.

Uses STORAGE_BACKEND (via config) to determine which implementation to use.
"""

from studio_analytics.base.repositories import EventRepository, SessionRepository
from studio_analytics.utils.config import Settings, get_settings


def get_repositories(
    settings: Settings | None = None,
) -> tuple[EventRepository, SessionRepository]:
    """
    Get unconnected event and session repositories for the configured backend.

    The backend is determined by the STORAGE_BACKEND environment variable:
    - "sqlite" (default): Embedded SQLite file, for local development
    - "postgres": Hosted PostgreSQL, for production

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        (EventRepository, SessionRepository) tuple

    Raises:
        ValueError: If an unknown backend is configured
    """
    settings = settings or get_settings()
    backend = settings.storage.backend

    match backend:
        case "sqlite":
            from studio_analytics.infrastructure.repositories.sqlite import (
                SQLiteEventRepository,
                SQLiteSessionRepository,
            )

            return SQLiteEventRepository(settings), SQLiteSessionRepository(settings)
        case "postgres":
            from studio_analytics.infrastructure.repositories.postgresql import (
                PostgreSQLEventRepository,
                PostgreSQLSessionRepository,
            )

            return PostgreSQLEventRepository(settings), PostgreSQLSessionRepository(settings)
        case _:
            raise ValueError(
                f"Unknown storage backend: '{backend}'.\n"
                "Valid options are: sqlite, postgres"
            )
