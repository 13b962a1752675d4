# ==============================================================================
# Session Reconstructor - Pure Domain Logic
# ==============================================================================
"""
Rebuilds per-session journeys from a flat event stream.

All methods work with plain dicts - no database or framework dependencies.
Events are consumed in the order given; callers that want chronological
journeys must sort by timestamp first (the repositories do).

Event dict structure:
    {
        "session_id": str,
        "visitor_id": str | None,
        "event_type": str,
        "event_data": dict,
        "timestamp": str,            # ISO-8601
    }

Session dict structure:
    {
        "session_id": str,
        "visitor_id": str,           # last non-empty value seen, else "unknown"
        "visited": bool,             # saw a session_start
        "used_filters": bool,        # saw a filter_change
        "clicked_registration": bool,
        "scrolled": bool,            # saw a scroll_depth
        "filters": list[dict],       # filter_change payloads, arrival order
        "registrations": list[dict], # registration_click payloads, arrival order
        "journey": list[dict],       # {event_type, event_data, timestamp}
        "start_time": str | None,    # timestamp of the session_start
        "unique_filter_types": set,  # filter types chosen with a value other than "all"
    }
"""

from typing import Any, Iterable

from studio_analytics.core.models import EventType

UNKNOWN_VISITOR = "unknown"

# Filter value meaning "no filter"; never counts as a used dimension
ALL_FILTER_VALUE = "all"


def payload_value(data: Any, key: str) -> Any:
    """
    Read a payload field by its snake_case name, falling back to camelCase.

    Missing keys (or a payload that isn't a mapping) give None.
    """
    if not isinstance(data, dict):
        return None
    if key in data:
        return data[key]
    head, *rest = key.split("_")
    return data.get(head + "".join(part.title() for part in rest))


def as_key(value: Any) -> Any:
    """Return ``value`` if it can be a set member or dict key, else its str()."""
    try:
        hash(value)
    except TypeError:
        return str(value)
    return value


def payload_key(data: Any, key: str) -> Any:
    """payload_value() made safe for use as a set member or dict key."""
    return as_key(payload_value(data, key))


class SessionReconstructor:
    """
    Groups events into sessions and sets the behavioral flags.

    Stateless: every call to reconstruct() builds a fresh mapping.
    """

    @staticmethod
    def create_session(session_id: str) -> dict:
        """Create a new empty session dict."""
        return {
            "session_id": session_id,
            "visitor_id": UNKNOWN_VISITOR,
            "visited": False,
            "used_filters": False,
            "clicked_registration": False,
            "scrolled": False,
            "filters": [],
            "registrations": [],
            "journey": [],
            "start_time": None,
            "unique_filter_types": set(),
        }

    def apply_event(self, session: dict, event: dict) -> dict:
        """
        Record one event on a session.

        Mutates the session dict in place and returns it.
        """
        visitor_id = event.get("visitor_id")
        if visitor_id:
            session["visitor_id"] = visitor_id

        event_type = event.get("event_type")
        event_data = event.get("event_data")
        timestamp = event.get("timestamp")

        session["journey"].append(
            {
                "event_type": event_type,
                "event_data": event_data,
                "timestamp": timestamp,
            }
        )

        if event_type == EventType.SESSION_START.value:
            session["visited"] = True
            session["start_time"] = timestamp
        elif event_type == EventType.FILTER_CHANGE.value:
            session["used_filters"] = True
            session["filters"].append(event_data)
            if payload_value(event_data, "filter_value") != ALL_FILTER_VALUE:
                session["unique_filter_types"].add(payload_key(event_data, "filter_type"))
        elif event_type == EventType.REGISTRATION_CLICK.value:
            session["clicked_registration"] = True
            session["registrations"].append(event_data)
        elif event_type == EventType.SCROLL_DEPTH.value:
            session["scrolled"] = True

        return session

    def reconstruct(self, events: Iterable[dict]) -> dict[str, dict]:
        """
        Build the session mapping for an event stream.

        Args:
            events: Event dicts, in the order they should appear in journeys

        Returns:
            Dict mapping session_id to session dict, in first-seen order
        """
        sessions: dict[str, dict] = {}
        for event in events:
            session_id = event["session_id"]
            session = sessions.get(session_id)
            if session is None:
                session = self.create_session(session_id)
                sessions[session_id] = session
            self.apply_event(session, event)
        return sessions


def reconstruct_sessions(events: Iterable[dict]) -> dict[str, dict]:
    """Convenience wrapper around SessionReconstructor().reconstruct()."""
    return SessionReconstructor().reconstruct(events)
