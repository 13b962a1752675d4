"""HTTP surface for the analytics service."""

from studio_analytics.api.server import create_app

__all__ = ["create_app"]
