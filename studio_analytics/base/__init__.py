# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the storage ports.

The service layer depends only on these; SQLite and PostgreSQL adapters live
in studio_analytics.infrastructure.repositories.
"""

from studio_analytics.base.repositories import EventRepository, SessionRepository

__all__ = [
    "EventRepository",
    "SessionRepository",
]
