"""Structured logging."""

from threshold_tracker.logging.setup import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
