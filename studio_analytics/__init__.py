"""Behavioral analytics and funnel reporting for the studio website."""

__version__ = "0.1.0"
