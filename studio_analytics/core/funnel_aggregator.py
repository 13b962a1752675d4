# ==============================================================================
# Funnel Aggregator - Pure Domain Logic
# ==============================================================================
"""
Turns reconstructed sessions into the funnel report.

A session is "active" when the visitor used a filter or scrolled; every
behavioral statistic is computed over active sessions only. Inactive
sessions are counted and exported for inspection, nothing more.

The report keeps the key names the reporting dashboard reads:

    {
        "totalVisitors": int,
        "usedFilters": int,
        "clickedRegistration": int,
        "conversionRate": str | int,     # "12.50", or 0 without active sessions
        "filterUsageBreakdown": {0: int, 1: int, 2: int, 3: int},
        "inactiveJourneys": int,
        "avgDuration": int,              # seconds
        "durationDistribution": {"under_30s": int, "30s_to_2m": int,
                                 "2m_to_5m": int, "over_5m": int},
        "popularFilters": {"byType": {...}, "topFilters": [...]},
        "popularClasses": [...],
        "activeJourneys": [...],
        "inactiveJourneysData": [...],
    }
"""

import logging
from typing import Iterable

from studio_analytics.core.popularity import get_popular_classes, get_popular_filters
from studio_analytics.core.session_reconstructor import SessionReconstructor
from studio_analytics.core.timestamps import elapsed_ms

logger = logging.getLogger(__name__)

# Duration buckets: (label, lower bound inclusive, upper bound exclusive), seconds
DURATION_BUCKETS = (
    ("under_30s", None, 30),
    ("30s_to_2m", 30, 120),
    ("2m_to_5m", 120, 300),
    ("over_5m", 300, None),
)

DISPLAY_ID_LENGTH = 8


def _round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half up (matches the dashboard's rounding)."""
    return (2 * numerator + denominator) // (2 * denominator)


def session_duration(session: dict) -> int:
    """
    Seconds between the first and last journey entries, floored at 0.

    Journeys are not re-sorted, so events received out of order can make the
    raw difference negative; that clamps to 0. Unparseable timestamps also
    give 0.
    """
    journey = session["journey"]
    if not journey:
        return 0
    try:
        duration_ms = elapsed_ms(journey[0]["timestamp"], journey[-1]["timestamp"])
    except (TypeError, ValueError):
        logger.debug("Unparseable timestamp in session %s", session["session_id"])
        return 0
    return max(0, _round_half_up(duration_ms, 1000))


def _bucket_for(duration: int) -> str:
    for label, lower, upper in DURATION_BUCKETS:
        if (lower is None or duration >= lower) and (upper is None or duration < upper):
            return label
    raise ValueError(f"No duration bucket for {duration}")


def _journey_export(session: dict) -> dict:
    session_id = session["session_id"]
    return {
        "session_id": session_id,
        "visitor_id": session["visitor_id"],
        "session_id_display": f"{session_id[:DISPLAY_ID_LENGTH]}...",
        "startTime": session["start_time"],
        "journey": session["journey"],
        "usedFilters": session["used_filters"],
        "clickedRegistration": session["clicked_registration"],
        "duration": session["duration"],
    }


class FunnelAggregator:
    """
    Computes the funnel report from a session mapping.

    Sessions are annotated with a ``duration`` key during aggregation;
    nothing else about them is changed, so aggregating the same mapping
    twice gives the same report.
    """

    @staticmethod
    def partition(sessions: list[dict]) -> tuple[list[dict], list[dict]]:
        """Split sessions into (active, inactive)."""
        active = [s for s in sessions if s["used_filters"] or s["scrolled"]]
        inactive = [s for s in sessions if not s["used_filters"] and not s["scrolled"]]
        return active, inactive

    @staticmethod
    def filter_usage_breakdown(active: list[dict]) -> dict[int, int]:
        """Number of sessions that used exactly N distinct filter dimensions."""
        breakdown = {0: 0, 1: 0, 2: 0, 3: 0}
        for session in active:
            used = len(session["unique_filter_types"])
            breakdown[used] = breakdown.get(used, 0) + 1
        return breakdown

    @staticmethod
    def average_duration(active: list[dict]) -> int:
        """Mean duration in whole seconds, ignoring sessions with zero duration."""
        durations = [s["duration"] for s in active if s["duration"] > 0]
        if not durations:
            return 0
        return _round_half_up(sum(durations), len(durations))

    @staticmethod
    def duration_distribution(active: list[dict]) -> dict[str, int]:
        distribution = {label: 0 for label, _, _ in DURATION_BUCKETS}
        for session in active:
            distribution[_bucket_for(session["duration"])] += 1
        return distribution

    @staticmethod
    def conversion_rate(active: list[dict]) -> str | int:
        """Percent of active sessions with a registration click, as "NN.NN"."""
        if not active:
            return 0
        converted = sum(1 for s in active if s["clicked_registration"])
        return f"{converted / len(active) * 100:.2f}"

    def aggregate(self, sessions: dict[str, dict]) -> dict:
        """
        Build the funnel report.

        Args:
            sessions: Mapping of session_id to session dict (see SessionReconstructor)

        Returns:
            Report dict, JSON-serializable
        """
        all_sessions = list(sessions.values())
        for session in all_sessions:
            session["duration"] = session_duration(session)

        active, inactive = self.partition(all_sessions)
        logger.debug(
            "Aggregating %d sessions (%d active, %d inactive)",
            len(all_sessions),
            len(active),
            len(inactive),
        )

        return {
            "totalVisitors": sum(1 for s in active if s["visited"]),
            "usedFilters": sum(1 for s in active if s["used_filters"]),
            "clickedRegistration": sum(1 for s in active if s["clicked_registration"]),
            "conversionRate": self.conversion_rate(active),
            "filterUsageBreakdown": self.filter_usage_breakdown(active),
            "inactiveJourneys": len(inactive),
            "avgDuration": self.average_duration(active),
            "durationDistribution": self.duration_distribution(active),
            "popularFilters": get_popular_filters(active),
            "popularClasses": get_popular_classes(active),
            "activeJourneys": [_journey_export(s) for s in active],
            "inactiveJourneysData": [_journey_export(s) for s in inactive],
        }


def calculate_funnel(events: Iterable[dict]) -> dict:
    """
    Reconstruct sessions from events and aggregate them into the funnel report.

    Args:
        events: Event dicts, ideally sorted by timestamp ascending

    Returns:
        Funnel report dict
    """
    sessions = SessionReconstructor().reconstruct(events)
    return FunnelAggregator().aggregate(sessions)
