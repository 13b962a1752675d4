# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

This module contains concrete implementations of the storage ports:
- repositories/ - Database adapters (SQLite, PostgreSQL)
"""

from studio_analytics.infrastructure.repositories import get_repositories

__all__ = [
    "get_repositories",
]
