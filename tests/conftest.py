# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- An event factory producing tracker-shaped event records
- Settings pointing at a throwaway SQLite file per test
- Connected SQLite repositories and an AnalyticsService on top of them
"""

from datetime import UTC, datetime, timedelta

import pytest

from studio_analytics.infrastructure.repositories.sqlite import (
    SQLiteEventRepository,
    SQLiteSessionRepository,
)
from studio_analytics.services.analytics import AnalyticsService
from studio_analytics.utils.config import Settings, SqliteSettings, StorageSettings
from studio_analytics.utils.db import init_schema

T0 = datetime(2025, 3, 1, 10, 0, 0, tzinfo=UTC)


def ts(seconds: float = 0) -> str:
    """ISO timestamp ``seconds`` after T0, in the tracker's format."""
    moment = T0 + timedelta(seconds=seconds)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_event(
    event_type: str,
    session_id: str = "s1",
    at: float = 0,
    visitor_id: str | None = "v1",
    **event_data,
) -> dict:
    """Build an event record as the tracker posts it."""
    return {
        "session_id": session_id,
        "visitor_id": visitor_id,
        "event_type": event_type,
        "event_data": event_data,
        "page_url": "/classes",
        "timestamp": ts(at),
    }


@pytest.fixture()
def settings(tmp_path):
    """Settings using a fresh SQLite file under tmp_path."""
    return Settings(
        storage=StorageSettings(backend="sqlite"),
        sqlite=SqliteSettings(path=tmp_path / "analytics.db"),
    )


@pytest.fixture()
def event_repo(settings):
    init_schema(settings)
    repo = SQLiteEventRepository(settings)
    repo.connect()
    yield repo
    repo.close()


@pytest.fixture()
def session_repo(settings):
    init_schema(settings)
    repo = SQLiteSessionRepository(settings)
    repo.connect()
    yield repo
    repo.close()


@pytest.fixture()
def service(event_repo, session_repo):
    """An AnalyticsService backed by the per-test SQLite file."""
    return AnalyticsService(event_repo, session_repo)
