# ==============================================================================
# Database Repository Adapters
# ==============================================================================
"""
Database adapters implementing the repository interfaces from base/repositories.py.

Currently supported:
- SQLite (sqlite.py) - embedded store for local development
- PostgreSQL (postgresql.py) - hosted backend for production
"""

from studio_analytics.infrastructure.repositories.factory import get_repositories
from studio_analytics.infrastructure.repositories.postgresql import (
    PostgreSQLEventRepository,
    PostgreSQLSessionRepository,
)
from studio_analytics.infrastructure.repositories.sqlite import (
    SQLiteEventRepository,
    SQLiteSessionRepository,
)

__all__ = [
    "PostgreSQLEventRepository",
    "PostgreSQLSessionRepository",
    "SQLiteEventRepository",
    "SQLiteSessionRepository",
    "get_repositories",
]
