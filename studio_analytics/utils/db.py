# ==============================================================================
# Database Utilities
# ==============================================================================
"""
Schema helpers for both storage backends.

Table DDL lives in studio_analytics/schema/ as Jinja2 templates; the
PostgreSQL one is rendered with the configured schema name. Creating tables
is idempotent (CREATE ... IF NOT EXISTS), there is no migration support.
"""

import logging
import sqlite3
from pathlib import Path

import psycopg2
from jinja2 import Template

from studio_analytics.utils.config import Settings, get_settings
from studio_analytics.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_standard

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schema"

# Connection timeout
CONNECT_TIMEOUT = 10


def get_schema_file(backend: str) -> Path:
    """Get the DDL template for a backend ("sqlite" or "postgres")."""
    name = "postgresql.sql" if backend == "postgres" else "sqlite.sql"
    path = SCHEMA_DIR / name
    if not path.exists():
        raise RuntimeError(f"Schema file not found: {path}")
    return path


def render_schema_sql(backend: str, schema_name: str = "analytics") -> str:
    """Render the schema SQL template for a backend."""
    template = Template(get_schema_file(backend).read_text())
    return template.render(schema_name=schema_name)


def add_connect_timeout(conn_string: str) -> str:
    """Add connect_timeout to connection string if not present."""
    if "connect_timeout" not in conn_string:
        separator = "&" if "?" in conn_string else "?"
        return f"{conn_string}{separator}connect_timeout={CONNECT_TIMEOUT}"
    return conn_string


@retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
def connect_postgres(settings: Settings) -> "psycopg2.extensions.connection":
    """Open a PostgreSQL connection, retrying transient failures."""
    return psycopg2.connect(add_connect_timeout(settings.postgres.connection_string))


def connect_sqlite(settings: Settings) -> sqlite3.Connection:
    """Open the SQLite database, creating its parent directory if needed."""
    path = settings.sqlite.path
    if str(path) != ":memory:":
        path.parent.mkdir(parents=True, exist_ok=True)
    # The HTTP server may touch the connection from a worker thread
    conn = sqlite3.connect(
        str(path), timeout=settings.sqlite.timeout_seconds, check_same_thread=False
    )
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(settings: Settings | None = None) -> None:
    """
    Create the analytics tables for the configured backend if missing.

    Raises:
        RuntimeError: If the schema cannot be created
    """
    settings = settings or get_settings()
    backend = settings.storage.backend
    sql = render_schema_sql(backend, settings.postgres.schema_name)

    try:
        if backend == "postgres":
            conn = connect_postgres(settings)
            try:
                with conn.cursor() as cur:
                    cur.execute(sql)
                conn.commit()
            finally:
                conn.close()
        else:
            conn = connect_sqlite(settings)
            try:
                conn.executescript(sql)
                conn.commit()
            finally:
                conn.close()
    except (sqlite3.Error, psycopg2.Error) as e:
        raise RuntimeError(f"Failed to initialize schema: {e}") from e

    logger.info("Schema ready (%s)", settings.describe_storage())


def check_db_connection(settings: Settings | None = None) -> bool:
    """Check if the configured backend is reachable."""
    settings = settings or get_settings()
    try:
        if settings.storage.backend == "postgres":
            conn = psycopg2.connect(
                settings.postgres.connection_string, connect_timeout=5
            )
        else:
            conn = connect_sqlite(settings)
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.close()
        finally:
            conn.close()
        return True
    except (sqlite3.Error, psycopg2.Error, OSError):
        return False
