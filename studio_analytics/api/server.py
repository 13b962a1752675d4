# ==============================================================================
# Analytics HTTP API
# ==============================================================================
"""
FastAPI application receiving tracker events and serving reports.

Endpoints:
    POST   /api/analytics                     store one event or an array
    GET    /api/analytics/summary             raw sessions and events
    GET    /api/analytics/funnel              funnel report
    DELETE /api/analytics/session/{id}        delete one session
    DELETE /api/analytics/clear               delete everything

Storage failures are logged and answered with a generic 500; malformed
bodies are rejected by request validation (422).

Handlers are ``async def`` and call the service inline, so requests are
served one at a time. Each repository holds a single connection, which must
not be used from several threads at once; moving the handlers to a
threadpool needs a connection pool first.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studio_analytics.core.models import AnalyticsEvent
from studio_analytics.services.analytics import AnalyticsService
from studio_analytics.utils.config import Settings, get_settings
from studio_analytics.utils.db import init_schema

logger = logging.getLogger(__name__)

StartDate = Annotated[datetime | None, Query(alias="startDate")]
EndDate = Annotated[datetime | None, Query(alias="endDate")]


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


def get_service(request: Request) -> AnalyticsService:
    """Dependency returning the service attached to the running app."""
    return request.app.state.service


def create_app(
    service: AnalyticsService | None = None, settings: Settings | None = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        service: Service to use. If None, one is created for the configured
            backend at startup (tables are created if missing) and closed at
            shutdown.
        settings: Application settings. If None, uses get_settings().
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if service is not None:
            app.state.service = service
            yield
            return

        init_schema(settings)
        owned = AnalyticsService.from_settings(settings)
        app.state.service = owned
        logger.info("Analytics API using %s", settings.describe_storage())
        try:
            yield
        finally:
            owned.close()

    app = FastAPI(title="Studio Analytics", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/analytics")
    async def store_events(
        payload: Annotated[AnalyticsEvent | list[AnalyticsEvent], Body()],
        svc: AnalyticsService = Depends(get_service),
    ):
        """Store a single event or an array of events."""
        try:
            svc.record(payload)
        except Exception:
            logger.exception("Error storing analytics")
            return _error("Failed to store analytics")
        return {"success": True}

    @app.get("/api/analytics/summary")
    async def analytics_summary(
        start: StartDate = None,
        end: EndDate = None,
        svc: AnalyticsService = Depends(get_service),
    ):
        """Raw sessions and events in a date range."""
        try:
            return svc.summary(start, end)
        except Exception:
            logger.exception("Error fetching analytics summary")
            return _error("Failed to fetch analytics")

    @app.get("/api/analytics/funnel")
    async def analytics_funnel(
        start: StartDate = None,
        end: EndDate = None,
        svc: AnalyticsService = Depends(get_service),
    ):
        """Funnel report for a date range."""
        try:
            return svc.funnel(start, end)
        except Exception:
            logger.exception("Error fetching funnel data")
            return _error("Failed to fetch funnel data")

    @app.delete("/api/analytics/session/{session_id}")
    async def delete_session(session_id: str, svc: AnalyticsService = Depends(get_service)):
        """Delete one session and its events."""
        try:
            return svc.delete_session(session_id)
        except Exception:
            logger.exception("Error deleting session %s", session_id)
            return _error("Failed to delete session")

    @app.delete("/api/analytics/clear")
    async def clear_data(svc: AnalyticsService = Depends(get_service)):
        """
        Clears all analytics data.
        WARNING: This action is irreversible.
        """
        try:
            return svc.clear()
        except Exception:
            logger.exception("Error clearing analytics data")
            return _error("Failed to clear data")

    return app
