# ==============================================================================
# Analytics Domain Models
# ==============================================================================
"""
Pydantic models for behavioral events and session rows.

These models are used for:
- Validating events posted by the browser tracker
- Normalizing timestamps before they reach storage
- Building the session row upserted on ``session_start``

The funnel logic itself (session reconstruction and aggregation) works on
plain dicts so that rows fetched from any backend can be fed to it directly.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from studio_analytics.core.timestamps import format_timestamp, parse_timestamp, utc_now


class EventType(str, Enum):
    """Event types emitted by the browser tracker."""

    SESSION_START = "session_start"
    FILTER_CHANGE = "filter_change"
    REGISTRATION_CLICK = "registration_click"
    SCROLL_DEPTH = "scroll_depth"
    PAGE_HIDDEN = "page_hidden"
    PAGE_VISIBLE = "page_visible"
    SESSION_END = "session_end"
    VIEW_CHANGE = "view_change"
    CLASS_VIEW = "class_view"
    SEARCH = "search"
    ERROR = "error"


class AnalyticsEvent(BaseModel):
    """
    A single event posted by the browser tracker.

    The event type is kept as a plain string: unknown types are stored and
    show up in journeys, they just don't move any funnel flag.

    Attributes:
        session_id: Client-generated session identifier
        visitor_id: Long-lived visitor identifier (may be missing on early events)
        event_type: Event type name (see EventType)
        event_data: Free-form payload whose shape depends on event_type
        page_url: Page the event was recorded on
        timestamp: Client-side event time, normalized to UTC
    """

    session_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("session_id", "sessionId"),
        description="Client-generated session identifier",
    )
    visitor_id: str | None = Field(
        None,
        validation_alias=AliasChoices("visitor_id", "visitorId"),
        description="Long-lived visitor identifier",
    )
    event_type: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("event_type", "eventType"),
        description="Event type name",
    )
    event_data: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("event_data", "eventData"),
        description="Event payload",
    )
    page_url: str | None = Field(
        None,
        validation_alias=AliasChoices("page_url", "pageUrl"),
        description="Page URL",
    )
    timestamp: datetime = Field(default_factory=utc_now, description="Event time (UTC)")

    @field_validator("event_data", mode="before")
    @classmethod
    def _none_payload_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("timestamp", mode="after")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return parse_timestamp(value)

    @property
    def is_session_start(self) -> bool:
        return self.event_type == EventType.SESSION_START.value

    def to_record(self) -> dict:
        """Convert event to the flat record format used by repositories and the core."""
        return {
            "session_id": self.session_id,
            "visitor_id": self.visitor_id,
            "event_type": self.event_type,
            "event_data": self.event_data,
            "page_url": self.page_url,
            "timestamp": format_timestamp(self.timestamp),
        }


class SessionRecord(BaseModel):
    """
    Session row stored alongside the events.

    Built from the payload of a ``session_start`` event. Only used for the
    summary endpoint; the funnel is derived from events alone.
    """

    session_id: str
    visitor_id: str | None = None
    user_agent: str | None = None
    screen_width: int | None = None
    screen_height: int | None = None
    referrer: str | None = None
    landing_page: str | None = None
    created_at: datetime

    @classmethod
    def from_event(cls, event: AnalyticsEvent) -> "SessionRecord":
        """Build a session row from a ``session_start`` event."""
        data = event.event_data
        return cls(
            session_id=event.session_id,
            visitor_id=event.visitor_id,
            user_agent=data.get("user_agent"),
            screen_width=_as_int(data.get("screen_width")),
            screen_height=_as_int(data.get("screen_height")),
            referrer=data.get("referrer"),
            landing_page=data.get("landing_page"),
            created_at=event.timestamp,
        )

    def to_db_record(self) -> dict:
        """Convert session to database record format."""
        return {
            "session_id": self.session_id,
            "visitor_id": self.visitor_id,
            "user_agent": self.user_agent,
            "screen_width": self.screen_width,
            "screen_height": self.screen_height,
            "referrer": self.referrer,
            "landing_page": self.landing_page,
            "created_at": format_timestamp(self.created_at),
        }


def _as_int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
