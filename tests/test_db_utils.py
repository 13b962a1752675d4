# ==============================================================================
# Tests for Database Utilities
# ==============================================================================
"""
Unit tests for schema rendering, connection helpers and the retry policy.
"""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from studio_analytics.utils.config import PostgresSettings, Settings, StorageSettings
from studio_analytics.utils.db import (
    add_connect_timeout,
    check_db_connection,
    connect_postgres,
    init_schema,
    render_schema_sql,
)
from studio_analytics.utils.retry import RETRY_ATTEMPTS


@pytest.fixture()
def pg_settings():
    return Settings(
        storage=StorageSettings(backend="postgres"),
        postgres=PostgresSettings(host="db.example.com", password="secret"),
    )


class TestSchemaSql:
    """Tests for DDL template rendering."""

    def test_postgres_uses_schema_name(self):
        sql = render_schema_sql("postgres", "web_analytics")
        assert "CREATE SCHEMA IF NOT EXISTS web_analytics" in sql
        assert "web_analytics.events" in sql
        assert "{{" not in sql

    def test_sqlite_tables(self):
        sql = render_schema_sql("sqlite")
        assert "CREATE TABLE IF NOT EXISTS sessions" in sql
        assert "CREATE TABLE IF NOT EXISTS events" in sql


class TestInitSchema:
    """Tests for creating tables."""

    def test_sqlite_is_idempotent(self, settings):
        init_schema(settings)
        init_schema(settings)
        assert settings.sqlite.path.exists()

    def test_sqlite_failure_is_runtime_error(self, settings):
        with patch("studio_analytics.utils.db.render_schema_sql", return_value="NOT SQL;"):
            with pytest.raises(RuntimeError, match="Failed to initialize schema"):
                init_schema(settings)

    def test_postgres_executes_rendered_sql(self, pg_settings):
        conn = MagicMock()
        with patch("studio_analytics.utils.db.connect_postgres", return_value=conn):
            init_schema(pg_settings)

        cursor = conn.cursor.return_value.__enter__.return_value
        assert "analytics.sessions" in cursor.execute.call_args[0][0]
        conn.commit.assert_called_once()
        conn.close.assert_called_once()


class TestConnections:
    """Tests for connecting to the backends."""

    def test_add_connect_timeout(self):
        assert add_connect_timeout("postgresql://h/db?sslmode=require").endswith(
            "&connect_timeout=10"
        )
        assert add_connect_timeout("postgresql://h/db") == "postgresql://h/db?connect_timeout=10"
        assert add_connect_timeout("postgresql://h/db?connect_timeout=3").endswith("=3")

    def test_connect_postgres_retries_transient_errors(self, pg_settings):
        conn = MagicMock()
        with (
            patch(
                "studio_analytics.utils.db.psycopg2.connect",
                side_effect=[psycopg2.OperationalError("timeout"), conn],
            ) as mock_connect,
            patch("time.sleep"),
        ):
            assert connect_postgres(pg_settings) is conn
        assert mock_connect.call_count == 2
        assert "db.example.com" in mock_connect.call_args[0][0]

    def test_connect_postgres_gives_up(self, pg_settings):
        with (
            patch(
                "studio_analytics.utils.db.psycopg2.connect",
                side_effect=psycopg2.OperationalError("down"),
            ) as mock_connect,
            patch("time.sleep"),
        ):
            with pytest.raises(psycopg2.OperationalError):
                connect_postgres(pg_settings)
        assert mock_connect.call_count == RETRY_ATTEMPTS

    def test_check_sqlite(self, settings):
        assert check_db_connection(settings) is True

    def test_check_postgres_unreachable(self, pg_settings):
        with patch(
            "studio_analytics.utils.db.psycopg2.connect",
            side_effect=psycopg2.OperationalError("refused"),
        ):
            assert check_db_connection(pg_settings) is False
