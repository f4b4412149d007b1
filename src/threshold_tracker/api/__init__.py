"""HTTP surface for health checks and manual triggers."""

from threshold_tracker.api.app import create_app

__all__ = ["create_app"]
