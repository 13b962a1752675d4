"""Application services built on the storage ports."""

from studio_analytics.services.analytics import AnalyticsService

__all__ = ["AnalyticsService"]
