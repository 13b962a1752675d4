# ==============================================================================
# Repository Abstract Base Classes
# ==============================================================================
"""
Repository ABCs for analytics persistence.

These define the "what" (save, query, delete) not the "how" (SQL dialect,
driver). Concrete implementations in infrastructure/ handle the specifics.

Includes:
- EventRepository: Raw behavioral events
- SessionRepository: One row per session, written on session_start

Time ranges are inclusive on both ends; either bound may be None.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class EventRepository(ABC):
    """Repository for behavioral events."""

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data store."""
        ...

    @abstractmethod
    def save(self, events: list[dict]) -> int:
        """
        Persist events.

        Args:
            events: Event records (see AnalyticsEvent.to_record)

        Returns:
            Count of events saved
        """
        ...

    @abstractmethod
    def fetch(self, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
        """
        Query events in a time range, oldest first.

        Returns:
            Event records with event_data decoded and timestamps as ISO strings
        """
        ...

    @abstractmethod
    def delete_session(self, session_id: str) -> int:
        """Delete every event of a session. Returns count deleted."""
        ...

    @abstractmethod
    def clear(self) -> int:
        """Delete all events. Returns count deleted."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...


class SessionRepository(ABC):
    """Repository for session rows."""

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data store."""
        ...

    @abstractmethod
    def save(self, sessions: list[dict]) -> int:
        """
        Upsert sessions keyed on session_id.

        Args:
            sessions: Session records (see SessionRecord.to_db_record)

        Returns:
            Count of sessions saved
        """
        ...

    @abstractmethod
    def fetch(self, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
        """Query sessions created in a time range."""
        ...

    @abstractmethod
    def delete(self, session_id: str) -> int:
        """Delete one session row. Returns count deleted."""
        ...

    @abstractmethod
    def clear(self) -> int:
        """Delete all session rows. Returns count deleted."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...
