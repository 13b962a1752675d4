# ==============================================================================
# Shared Utilities
# ==============================================================================
"""
Shared utilities: configuration, logging, retry policy and schema helpers.
"""

from studio_analytics.utils.config import (
    PostgresSettings,
    ServerSettings,
    Settings,
    SqliteSettings,
    StorageSettings,
    get_settings,
)
from studio_analytics.utils.db import check_db_connection, init_schema
from studio_analytics.utils.log import setup_logging

__all__ = [
    "PostgresSettings",
    "ServerSettings",
    "Settings",
    "SqliteSettings",
    "StorageSettings",
    "check_db_connection",
    "get_settings",
    "init_schema",
    "setup_logging",
]
