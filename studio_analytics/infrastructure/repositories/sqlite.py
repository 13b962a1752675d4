# ==============================================================================
# SQLite Repository Implementations
# ==============================================================================
"""
SQLite implementations of the repository interfaces.

The embedded store used for local development. Payloads are stored as JSON
text and timestamps as millisecond UTC ISO strings, so range filters compare
correctly as text.

Provides:
- SQLiteEventRepository: Insert and range queries over events
- SQLiteSessionRepository: Upsert session rows
"""

import json
import logging
import sqlite3
from datetime import datetime

from studio_analytics.base.repositories import EventRepository, SessionRepository
from studio_analytics.core.timestamps import format_timestamp
from studio_analytics.utils.config import Settings, get_settings
from studio_analytics.utils.db import connect_sqlite

logger = logging.getLogger(__name__)


def _range_clause(column: str, start: datetime | None, end: datetime | None) -> tuple[str, list]:
    """Build an inclusive WHERE clause for an optional time range."""
    conditions = []
    params: list = []
    if start is not None:
        conditions.append(f"{column} >= ?")
        params.append(format_timestamp(start))
    if end is not None:
        conditions.append(f"{column} <= ?")
        params.append(format_timestamp(end))
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


def _decode_payload(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Skipping undecodable event payload: %.80s", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


class _SQLiteRepository:
    """Connection lifecycle shared by the SQLite repositories."""

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the repository.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self._settings = settings or get_settings()
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the SQLite database."""
        self._conn = connect_sqlite(self._settings)
        logger.info("%s connected (path=%s)", type(self).__name__, self._settings.sqlite.path)

    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("SQLite connection not established. Call connect() first.")
        return self._conn

    def _execute_delete(self, sql: str, params: tuple = ()) -> int:
        conn = self._require_connection()
        with conn:
            cur = conn.execute(sql, params)
        return cur.rowcount

    def close(self) -> None:
        """Close connection and release resources."""
        if self._conn:
            try:
                self._conn.close()
                logger.info("%s connection closed", type(self).__name__)
            except sqlite3.Error as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self._conn = None


class SQLiteEventRepository(_SQLiteRepository, EventRepository):
    """SQLite implementation of EventRepository."""

    def save(self, events: list[dict]) -> int:
        """
        Persist events to SQLite.

        Args:
            events: List of event records with keys session_id, visitor_id,
                event_type, event_data, page_url, timestamp

        Returns:
            Count of events saved
        """
        conn = self._require_connection()

        if not events:
            return 0

        rows = [
            (
                event["session_id"],
                event.get("visitor_id"),
                event["event_type"],
                json.dumps(event.get("event_data") or {}),
                event.get("page_url"),
                format_timestamp(event["timestamp"]),
            )
            for event in events
        ]
        with conn:
            conn.executemany(
                """
                INSERT INTO events
                    (session_id, visitor_id, event_type, event_data, page_url, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        logger.debug("Inserted %d events", len(rows))
        return len(rows)

    def fetch(self, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
        """Query events in a time range, oldest first."""
        conn = self._require_connection()
        where, params = _range_clause("timestamp", start, end)
        cur = conn.execute(
            f"""
            SELECT id, session_id, visitor_id, event_type, event_data, page_url, timestamp
            FROM events
            {where}
            ORDER BY timestamp ASC, id ASC
            """,
            params,
        )
        return [
            {**dict(row), "event_data": _decode_payload(row["event_data"])}
            for row in cur.fetchall()
        ]

    def delete_session(self, session_id: str) -> int:
        """Delete every event of a session."""
        return self._execute_delete("DELETE FROM events WHERE session_id = ?", (session_id,))

    def clear(self) -> int:
        """Delete all events."""
        return self._execute_delete("DELETE FROM events")


class SQLiteSessionRepository(_SQLiteRepository, SessionRepository):
    """
    SQLite implementation of SessionRepository.

    Uses INSERT ... ON CONFLICT(session_id) DO UPDATE for upserts.
    """

    def save(self, sessions: list[dict]) -> int:
        """
        Persist sessions to SQLite using upsert.

        Returns:
            Count of sessions saved
        """
        conn = self._require_connection()

        if not sessions:
            return 0

        with conn:
            conn.executemany(
                """
                INSERT INTO sessions (
                    session_id, visitor_id, user_agent, screen_width,
                    screen_height, referrer, landing_page, created_at
                ) VALUES (
                    :session_id, :visitor_id, :user_agent, :screen_width,
                    :screen_height, :referrer, :landing_page, :created_at
                )
                ON CONFLICT(session_id) DO UPDATE SET
                    visitor_id = excluded.visitor_id,
                    user_agent = excluded.user_agent,
                    screen_width = excluded.screen_width,
                    screen_height = excluded.screen_height,
                    referrer = excluded.referrer,
                    landing_page = excluded.landing_page,
                    created_at = excluded.created_at
                """,
                sessions,
            )
        logger.debug("Upserted %d sessions", len(sessions))
        return len(sessions)

    def fetch(self, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
        """Query sessions created in a time range."""
        conn = self._require_connection()
        where, params = _range_clause("created_at", start, end)
        cur = conn.execute(
            f"""
            SELECT id, session_id, visitor_id, user_agent, screen_width, screen_height,
                   referrer, landing_page, created_at
            FROM sessions
            {where}
            ORDER BY created_at ASC, id ASC
            """,
            params,
        )
        return [dict(row) for row in cur.fetchall()]

    def delete(self, session_id: str) -> int:
        """Delete one session row."""
        return self._execute_delete("DELETE FROM sessions WHERE session_id = ?", (session_id,))

    def clear(self) -> int:
        """Delete all session rows."""
        return self._execute_delete("DELETE FROM sessions")
