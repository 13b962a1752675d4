# ==============================================================================
# Tests for FunnelAggregator
# ==============================================================================
"""
Unit tests for turning sessions into the funnel report.

Tests cover:
- Session duration (rounding, clamping, bad timestamps)
- Active / inactive partitioning
- Filter usage breakdown, duration statistics and buckets
- Conversion rate (including the zero-active case)
- Journey exports and report-level invariants
"""

import json

import pytest
from conftest import make_event, ts

from studio_analytics.core.funnel_aggregator import (
    FunnelAggregator,
    calculate_funnel,
    session_duration,
)
from studio_analytics.core.session_reconstructor import reconstruct_sessions


def _scroll_session(session_id: str, duration: float, **extra) -> list[dict]:
    """Events for an active session lasting ``duration`` seconds."""
    return [
        make_event("session_start", session_id=session_id),
        make_event("scroll_depth", session_id=session_id, at=duration, depth=25, **extra),
    ]


# ==============================================================================
# Duration
# ==============================================================================


class TestSessionDuration:
    """Tests for the per-session duration pass."""

    def test_first_to_last_entry(self):
        session = reconstruct_sessions(_scroll_session("s1", 95))["s1"]
        assert session_duration(session) == 95

    def test_rounds_half_up(self):
        session = reconstruct_sessions(_scroll_session("s1", 29.5))["s1"]
        assert session_duration(session) == 30

    def test_rounds_down_below_half(self):
        session = reconstruct_sessions(_scroll_session("s1", 12.4))["s1"]
        assert session_duration(session) == 12

    def test_out_of_order_clamps_to_zero(self):
        events = [
            make_event("scroll_depth", at=60, depth=25),
            make_event("session_start", at=0),
        ]
        session = reconstruct_sessions(events)["s1"]
        assert session_duration(session) == 0

    def test_single_event_is_zero(self):
        session = reconstruct_sessions([make_event("scroll_depth", depth=25)])["s1"]
        assert session_duration(session) == 0

    def test_empty_journey_is_zero(self):
        assert session_duration({"session_id": "x", "journey": []}) == 0

    def test_unparseable_timestamp_is_zero(self):
        events = [make_event("session_start"), make_event("scroll_depth", at=5, depth=25)]
        events[1]["timestamp"] = "not a time"
        session = reconstruct_sessions(events)["s1"]
        assert session_duration(session) == 0

    def test_mixed_timestamp_formats(self):
        events = _scroll_session("s1", 0)
        events[0]["timestamp"] = "2025-03-01T10:00:00Z"
        events[1]["timestamp"] = "2025-03-01T11:00:10+01:00"
        session = reconstruct_sessions(events)["s1"]
        assert session_duration(session) == 10


# ==============================================================================
# Partitioning
# ==============================================================================


class TestPartition:
    """Tests for active / inactive classification."""

    def test_scroll_only_is_active(self):
        report = calculate_funnel([make_event("scroll_depth", depth=25)])
        assert len(report["activeJourneys"]) == 1
        assert report["activeJourneys"][0]["usedFilters"] is False
        assert report["filterUsageBreakdown"][0] == 1

    def test_visibility_only_is_inactive(self):
        report = calculate_funnel([make_event("page_visible")])
        assert report["inactiveJourneys"] == 1
        assert report["activeJourneys"] == []
        assert report["conversionRate"] == 0

    def test_registration_without_filters_or_scroll_is_inactive(self):
        events = [
            make_event("session_start"),
            make_event("registration_click", at=5, class_id="1", class_name="Tap"),
        ]
        report = calculate_funnel(events)
        assert report["inactiveJourneys"] == 1
        assert report["clickedRegistration"] == 0
        assert report["popularClasses"] == []

    def test_partition_covers_every_session(self):
        events = (
            _scroll_session("a", 10)
            + [make_event("page_visible", session_id="b")]
            + [make_event("filter_change", session_id="c", filter_type="age", filter_value="all")]
        )
        sessions = reconstruct_sessions(events)
        active, inactive = FunnelAggregator.partition(list(sessions.values()))
        assert len(active) + len(inactive) == len(sessions)
        assert [s["session_id"] for s in active] == ["a", "c"]


# ==============================================================================
# Statistics
# ==============================================================================


class TestStatistics:
    """Tests for breakdowns, durations and conversion."""

    def test_filter_usage_breakdown(self):
        events = [
            make_event("filter_change", session_id="one", filter_type="age", filter_value="teen"),
            make_event("filter_change", session_id="one", at=1, filter_type="age", filter_value="adult"),
            make_event("filter_change", session_id="two", filter_type="age", filter_value="teen"),
            make_event("filter_change", session_id="two", at=1, filter_type="style", filter_value="jazz"),
            make_event("filter_change", session_id="two", at=2, filter_type="day", filter_value="mon"),
            make_event("scroll_depth", session_id="none", depth=25),
        ]
        report = calculate_funnel(events)
        assert report["filterUsageBreakdown"] == {0: 1, 1: 1, 2: 0, 3: 1}

    def test_breakdown_accepts_extra_dimensions(self):
        events = [
            make_event("filter_change", at=i, filter_type=kind, filter_value="x")
            for i, kind in enumerate(["age", "style", "day", "level"])
        ]
        report = calculate_funnel(events)
        assert report["filterUsageBreakdown"][4] == 1

    def test_average_ignores_zero_durations(self):
        events = (
            _scroll_session("a", 10)
            + _scroll_session("b", 21)
            + [make_event("scroll_depth", session_id="c", depth=25)]
        )
        report = calculate_funnel(events)
        assert report["avgDuration"] == 16  # (10 + 21) / 2 rounded half up

    def test_average_without_positive_durations(self):
        report = calculate_funnel([make_event("scroll_depth", depth=25)])
        assert report["avgDuration"] == 0

    def test_duration_buckets_are_half_open(self):
        events = []
        for i, seconds in enumerate([0, 29, 30, 119, 120, 299, 300, 3600]):
            events += _scroll_session(f"s{i}", seconds)
        report = calculate_funnel(events)
        assert report["durationDistribution"] == {
            "under_30s": 2,
            "30s_to_2m": 2,
            "2m_to_5m": 2,
            "over_5m": 2,
        }

    def test_buckets_exclude_inactive_sessions(self):
        events = _scroll_session("a", 10) + [
            make_event("session_start", session_id="b"),
            make_event("page_hidden", session_id="b", at=400),
        ]
        report = calculate_funnel(events)
        assert sum(report["durationDistribution"].values()) == 1

    def test_conversion_rate_two_decimals(self):
        events = _scroll_session("a", 10) + _scroll_session("b", 10) + _scroll_session("c", 10)
        events.append(make_event("registration_click", session_id="a", at=11, class_id="1"))
        report = calculate_funnel(events)
        assert report["conversionRate"] == "33.33"

    def test_conversion_rate_zero_without_active_sessions(self):
        report = calculate_funnel([])
        assert report["conversionRate"] == 0
        assert report["totalVisitors"] == 0

    def test_total_visitors_counts_active_session_starts(self):
        events = _scroll_session("a", 5) + [make_event("scroll_depth", session_id="b", depth=25)]
        report = calculate_funnel(events)
        assert report["totalVisitors"] == 1


# ==============================================================================
# Journey exports
# ==============================================================================


class TestJourneyExports:
    """Tests for activeJourneys / inactiveJourneysData."""

    def test_export_shape(self):
        events = [
            make_event("session_start", session_id="1700000000000-abcdefghi"),
            make_event("scroll_depth", session_id="1700000000000-abcdefghi", at=12, depth=25),
        ]
        exported = calculate_funnel(events)["activeJourneys"][0]
        assert exported == {
            "session_id": "1700000000000-abcdefghi",
            "visitor_id": "v1",
            "session_id_display": "17000000...",
            "startTime": ts(0),
            "journey": [
                {"event_type": "session_start", "event_data": {}, "timestamp": ts(0)},
                {"event_type": "scroll_depth", "event_data": {"depth": 25}, "timestamp": ts(12)},
            ],
            "usedFilters": False,
            "clickedRegistration": False,
            "duration": 12,
        }

    def test_inactive_export(self):
        report = calculate_funnel([make_event("page_visible", session_id="abc", visitor_id=None)])
        exported = report["inactiveJourneysData"][0]
        assert exported["session_id_display"] == "abc..."
        assert exported["visitor_id"] == "unknown"
        assert exported["startTime"] is None


# ==============================================================================
# Whole report
# ==============================================================================


class TestReport:
    """End-to-end checks on the report."""

    def test_worked_example(self):
        events = [
            make_event("session_start"),
            make_event("filter_change", at=10, filter_type="age", filter_value="teen"),
            make_event("registration_click", at=40, class_id="42", class_name="Jazz I"),
        ]
        sessions = reconstruct_sessions(events)
        report = FunnelAggregator().aggregate(sessions)

        session = sessions["s1"]
        assert session["used_filters"] is True
        assert session["clicked_registration"] is True
        assert session["duration"] == 40
        assert session["unique_filter_types"] == {"age"}

        assert report["totalVisitors"] == 1
        assert report["usedFilters"] == 1
        assert report["clickedRegistration"] == 1
        assert report["conversionRate"] == "100.00"
        assert report["inactiveJourneys"] == 0
        assert report["avgDuration"] == 40
        assert report["popularClasses"] == [{"class_id": "42", "class_name": "Jazz I", "count": 1}]
        assert report["popularFilters"]["topFilters"] == [{"filter": "age: teen", "count": 1}]

    def test_report_keys(self):
        assert set(calculate_funnel([])) == {
            "totalVisitors",
            "usedFilters",
            "clickedRegistration",
            "conversionRate",
            "filterUsageBreakdown",
            "inactiveJourneys",
            "avgDuration",
            "durationDistribution",
            "popularFilters",
            "popularClasses",
            "activeJourneys",
            "inactiveJourneysData",
        }

    def test_aggregating_twice_is_identical(self):
        events = (
            _scroll_session("a", 45)
            + [make_event("filter_change", session_id="b", filter_type="day", filter_value="tue")]
            + [make_event("page_visible", session_id="c")]
        )
        sessions = reconstruct_sessions(events)
        aggregator = FunnelAggregator()
        first = json.dumps(aggregator.aggregate(sessions), sort_keys=True)
        second = json.dumps(aggregator.aggregate(sessions), sort_keys=True)
        assert first == second

    @pytest.mark.parametrize("clicks", [0, 1, 3])
    def test_conversion_rate_bounds(self, clicks):
        events = _scroll_session("a", 1) + _scroll_session("b", 1) + _scroll_session("c", 1)
        for session_id in "abc"[:clicks]:
            events.append(make_event("registration_click", session_id=session_id, at=2))
        rate = float(calculate_funnel(events)["conversionRate"])
        assert 0 <= rate <= 100


class TestMalformedPayloads:
    """The report is still produced for odd payload shapes."""

    def test_list_and_object_values(self):
        events = [
            make_event("filter_change", filter_type=["age"], filter_value="teen"),
            make_event("registration_click", at=5, class_name={"x": 1}),
        ]
        report = calculate_funnel(events)
        assert report["filterUsageBreakdown"][1] == 1
        assert report["popularClasses"][0]["count"] == 1
