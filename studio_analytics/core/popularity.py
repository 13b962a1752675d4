# ==============================================================================
# Popularity Rankings
# ==============================================================================
"""
Rank the filters and classes active sessions interacted with.

Both rankings are stable: entries with equal counts keep the order in which
they were first seen.
"""

from studio_analytics.core.session_reconstructor import (
    ALL_FILTER_VALUE,
    as_key,
    payload_key,
    payload_value,
)

TOP_N = 10

# Filter dimensions offered on the class schedule
FILTER_TYPES = ("age", "style", "day")


def _top(counts: dict, n: int = TOP_N) -> list:
    return sorted(counts.items(), key=lambda item: -item[1])[:n]


def get_popular_filters(sessions: list[dict]) -> dict:
    """
    Count filter selections, ignoring "all".

    Returns:
        {
            "byType": {"age": int, "style": int, "day": int, ...},
            "topFilters": [{"filter": "age: teen", "count": int}, ...],
        }

    Filter types outside FILTER_TYPES are still counted under their own key.
    """
    filter_counts: dict[str, int] = {}
    type_counts: dict[str, int] = {filter_type: 0 for filter_type in FILTER_TYPES}

    for session in sessions:
        for selection in session["filters"]:
            filter_value = payload_value(selection, "filter_value")
            if filter_value == ALL_FILTER_VALUE:
                continue
            filter_type = payload_key(selection, "filter_type")
            type_counts[filter_type] = type_counts.get(filter_type, 0) + 1

            key = f"{filter_type}: {filter_value}"
            filter_counts[key] = filter_counts.get(key, 0) + 1

    return {
        "byType": type_counts,
        "topFilters": [{"filter": key, "count": count} for key, count in _top(filter_counts)],
    }


def get_popular_classes(sessions: list[dict]) -> list[dict]:
    """
    Count registration clicks per class.

    Classes are keyed by name, falling back to id. Each entry carries the
    fields of the first registration seen for that class plus a ``count``.
    """
    class_counts: dict = {}

    for session in sessions:
        for registration in session["registrations"]:
            key = as_key(
                payload_value(registration, "class_name")
                or payload_value(registration, "class_id")
            )
            entry = class_counts.get(key)
            if entry is None:
                fields = registration if isinstance(registration, dict) else {}
                entry = {**fields, "count": 0}
                class_counts[key] = entry
            entry["count"] += 1

    return sorted(class_counts.values(), key=lambda entry: -entry["count"])[:TOP_N]
