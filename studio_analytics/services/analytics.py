# ==============================================================================
# Analytics Service
# ==============================================================================
"""
Storage-facing operations behind the HTTP API and the CLI.

The service owns no state beyond its two repositories. Funnel reports are
computed by the pure core (studio_analytics.core) from events the event
repository returns already sorted by timestamp.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from studio_analytics.base.repositories import EventRepository, SessionRepository
from studio_analytics.core.funnel_aggregator import calculate_funnel
from studio_analytics.core.models import AnalyticsEvent, SessionRecord
from studio_analytics.infrastructure.repositories.factory import get_repositories
from studio_analytics.utils.config import Settings

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Ingest, query and delete analytics data."""

    def __init__(self, event_repo: EventRepository, session_repo: SessionRepository):
        self._event_repo = event_repo
        self._session_repo = session_repo

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AnalyticsService":
        """Build a connected service for the configured backend."""
        event_repo, session_repo = get_repositories(settings)
        event_repo.connect()
        try:
            session_repo.connect()
        except Exception:
            event_repo.close()
            raise
        return cls(event_repo, session_repo)

    def close(self) -> None:
        self._event_repo.close()
        self._session_repo.close()

    def __enter__(self) -> "AnalyticsService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def record(self, events: AnalyticsEvent | Iterable[AnalyticsEvent]) -> int:
        """
        Store one event or a batch.

        Every session_start also upserts the session row.

        Returns:
            Count of events stored
        """
        if isinstance(events, AnalyticsEvent):
            events = [events]
        events = list(events)

        sessions = [
            SessionRecord.from_event(event).to_db_record()
            for event in events
            if event.is_session_start
        ]
        if sessions:
            self._session_repo.save(sessions)

        saved = self._event_repo.save([event.to_record() for event in events])
        logger.debug("Recorded %d events (%d session starts)", saved, len(sessions))
        return saved

    def summary(self, start: datetime | None = None, end: datetime | None = None) -> dict:
        """Raw sessions and events in a date range."""
        sessions = self._session_repo.fetch(start, end)
        events = self._event_repo.fetch(start, end)
        return {
            "totalSessions": len(sessions),
            "totalEvents": len(events),
            "sessions": sessions,
            "events": events,
        }

    def funnel(self, start: datetime | None = None, end: datetime | None = None) -> dict:
        """Funnel report over the events in a date range."""
        events = self._event_repo.fetch(start, end)
        logger.debug("Computing funnel over %d events", len(events))
        return calculate_funnel(events)

    def delete_session(self, session_id: str) -> dict:
        """Delete a session's events, then its session row."""
        events_deleted = self._event_repo.delete_session(session_id)
        self._session_repo.delete(session_id)
        logger.info("Deleted session %s (%d events)", session_id, events_deleted)
        return {"success": True, "sessionId": session_id}

    def clear(self) -> dict:
        """Delete all events and sessions."""
        events_deleted = self._event_repo.clear()
        sessions_deleted = self._session_repo.clear()
        logger.info("Cleared %d events and %d sessions", events_deleted, sessions_deleted)
        return {
            "success": True,
            "eventsDeleted": events_deleted,
            "sessionsDeleted": sessions_deleted,
        }
