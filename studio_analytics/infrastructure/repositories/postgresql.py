# ==============================================================================
# PostgreSQL Repository Implementations
# ==============================================================================
"""
PostgreSQL implementations of the repository interfaces.

Used in production against a hosted Postgres-as-a-service database.

Provides:
- PostgreSQLEventRepository: Bulk insert and range queries over events
- PostgreSQLSessionRepository: Upsert session rows
"""

import logging
from datetime import datetime

import psycopg2
from psycopg2.extras import Json, RealDictCursor, execute_batch

from studio_analytics.base.repositories import EventRepository, SessionRepository
from studio_analytics.core.timestamps import format_timestamp
from studio_analytics.utils.config import Settings, get_settings
from studio_analytics.utils.db import connect_postgres

logger = logging.getLogger(__name__)

# Batch size for execute_batch
PAGE_SIZE = 1000


def _range_clause(column: str, start: datetime | None, end: datetime | None) -> tuple[str, list]:
    """Build an inclusive WHERE clause for an optional time range."""
    conditions = []
    params: list = []
    if start is not None:
        conditions.append(f"{column} >= %s")
        params.append(start)
    if end is not None:
        conditions.append(f"{column} <= %s")
        params.append(end)
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


class _PostgreSQLRepository:
    """Connection lifecycle shared by the PostgreSQL repositories."""

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the repository.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self._settings = settings or get_settings()
        self._conn: psycopg2.extensions.connection | None = None
        self._schema = self._settings.postgres.schema_name

    @property
    def schema(self) -> str:
        """Get the database schema name."""
        return self._schema

    def connect(self) -> None:
        """Establish connection to PostgreSQL."""
        self._conn = connect_postgres(self._settings)
        logger.info("%s connected (schema=%s)", type(self).__name__, self._schema)

    def _require_connection(self) -> "psycopg2.extensions.connection":
        if self._conn is None:
            raise RuntimeError("PostgreSQL connection not established. Call connect() first.")
        return self._conn

    def _execute_delete(self, sql: str, params: tuple = ()) -> int:
        conn = self._require_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                deleted = cur.rowcount
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise
        return deleted

    def close(self) -> None:
        """Close connection and release resources."""
        if self._conn:
            try:
                self._conn.close()
                logger.info("%s connection closed", type(self).__name__)
            except psycopg2.Error as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self._conn = None


class PostgreSQLEventRepository(_PostgreSQLRepository, EventRepository):
    """
    PostgreSQL implementation of EventRepository.

    Uses psycopg2.extras.execute_batch() for bulk inserts. Payloads are
    stored as JSONB.
    """

    def save(self, events: list[dict]) -> int:
        """
        Persist events to PostgreSQL.

        Args:
            events: List of event records with keys session_id, visitor_id,
                event_type, event_data, page_url, timestamp

        Returns:
            Count of events saved
        """
        conn = self._require_connection()

        if not events:
            return 0

        rows = [{**event, "event_data": Json(event.get("event_data") or {})} for event in events]

        try:
            with conn.cursor() as cur:
                execute_batch(
                    cur,
                    f"""
                    INSERT INTO {self._schema}.events
                        (session_id, visitor_id, event_type, event_data, page_url, timestamp)
                    VALUES
                        (%(session_id)s, %(visitor_id)s, %(event_type)s, %(event_data)s,
                         %(page_url)s, %(timestamp)s)
                    """,
                    rows,
                    page_size=PAGE_SIZE,
                )
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise
        logger.debug("Inserted %d events", len(rows))
        return len(rows)

    def fetch(self, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
        """Query events in a time range, oldest first."""
        conn = self._require_connection()
        where, params = _range_clause("timestamp", start, end)

        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    f"""
                    SELECT id, session_id, visitor_id, event_type, event_data, page_url, timestamp
                    FROM {self._schema}.events
                    {where}
                    ORDER BY timestamp ASC, id ASC
                    """,
                    params,
                )
                rows = cur.fetchall()
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise

        return [
            {
                **row,
                "event_data": row["event_data"] or {},
                "timestamp": format_timestamp(row["timestamp"]),
            }
            for row in rows
        ]

    def delete_session(self, session_id: str) -> int:
        """Delete every event of a session."""
        return self._execute_delete(
            f"DELETE FROM {self._schema}.events WHERE session_id = %s", (session_id,)
        )

    def clear(self) -> int:
        """Delete all events."""
        return self._execute_delete(f"DELETE FROM {self._schema}.events")


class PostgreSQLSessionRepository(_PostgreSQLRepository, SessionRepository):
    """
    PostgreSQL implementation of SessionRepository.

    Sessions are upserted using ON CONFLICT ... DO UPDATE so a repeated
    session_start refreshes the row instead of failing.
    """

    def save(self, sessions: list[dict]) -> int:
        """
        Persist sessions to PostgreSQL using upsert.

        Returns:
            Count of sessions saved
        """
        conn = self._require_connection()

        if not sessions:
            return 0

        try:
            with conn.cursor() as cur:
                execute_batch(
                    cur,
                    f"""
                    INSERT INTO {self._schema}.sessions (
                        session_id, visitor_id, user_agent, screen_width,
                        screen_height, referrer, landing_page, created_at
                    ) VALUES (
                        %(session_id)s, %(visitor_id)s, %(user_agent)s, %(screen_width)s,
                        %(screen_height)s, %(referrer)s, %(landing_page)s, %(created_at)s
                    )
                    ON CONFLICT (session_id) DO UPDATE SET
                        visitor_id = EXCLUDED.visitor_id,
                        user_agent = EXCLUDED.user_agent,
                        screen_width = EXCLUDED.screen_width,
                        screen_height = EXCLUDED.screen_height,
                        referrer = EXCLUDED.referrer,
                        landing_page = EXCLUDED.landing_page,
                        created_at = EXCLUDED.created_at
                    """,
                    sessions,
                    page_size=PAGE_SIZE,
                )
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise
        logger.debug("Upserted %d sessions", len(sessions))
        return len(sessions)

    def fetch(self, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
        """Query sessions created in a time range."""
        conn = self._require_connection()
        where, params = _range_clause("created_at", start, end)

        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    f"""
                    SELECT id, session_id, visitor_id, user_agent, screen_width, screen_height,
                           referrer, landing_page, created_at
                    FROM {self._schema}.sessions
                    {where}
                    ORDER BY created_at ASC, id ASC
                    """,
                    params,
                )
                rows = cur.fetchall()
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise

        return [
            {
                **row,
                "created_at": format_timestamp(row["created_at"]) if row["created_at"] else None,
            }
            for row in rows
        ]

    def delete(self, session_id: str) -> int:
        """Delete one session row."""
        return self._execute_delete(
            f"DELETE FROM {self._schema}.sessions WHERE session_id = %s", (session_id,)
        )

    def clear(self) -> int:
        """Delete all session rows."""
        return self._execute_delete(f"DELETE FROM {self._schema}.sessions")
