"""Quarterly task planner: quarter/week calendar engine plus a small JSON API."""

from .app_factory import create_app

__all__ = ["create_app"]
