# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no I/O.

This module contains:
- Domain models (AnalyticsEvent, SessionRecord, EventType)
- Session reconstruction (events -> per-session journeys and flags)
- Funnel aggregation (sessions -> report) and popularity rankings

All code here is framework-agnostic and easily unit-testable.
"""

from studio_analytics.core.funnel_aggregator import FunnelAggregator, calculate_funnel
from studio_analytics.core.models import AnalyticsEvent, EventType, SessionRecord
from studio_analytics.core.popularity import get_popular_classes, get_popular_filters
from studio_analytics.core.session_reconstructor import (
    SessionReconstructor,
    reconstruct_sessions,
)

__all__ = [
    "AnalyticsEvent",
    "EventType",
    "FunnelAggregator",
    "SessionRecord",
    "SessionReconstructor",
    "calculate_funnel",
    "get_popular_classes",
    "get_popular_filters",
    "reconstruct_sessions",
]
