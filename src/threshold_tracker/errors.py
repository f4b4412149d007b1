"""Exception taxonomy for the acquisition pipeline.

Strategies absorb every one of these and report "no data"; only
``DataUnavailableError`` is ever visible to a caller, and only through
``FetchOrchestrator.require()``.
"""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base class for tracker errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class DecodeError(TrackerError):
    """Account buffer too short or holding implausible values."""


class NotFoundError(TrackerError):
    """Referenced account or page does not exist."""


class RateLimitedError(TrackerError):
    """Upstream answered with HTTP 429."""

    def __init__(self, message: str, retry_after: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class InterstitialBlockedError(TrackerError):
    """Anti-automation challenge page did not clear in time."""


class RpcError(TrackerError):
    """JSON-RPC node returned an error object."""

    def __init__(self, message: str, code: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.code = code


class DataUnavailableError(TrackerError):
    """Every acquisition strategy came back empty."""

    def __init__(self, attempted: list[str], **kwargs: Any):
        super().__init__(
            f"no data from any source (tried: {', '.join(attempted) or 'none'})",
            **kwargs,
        )
        self.attempted = attempted


class PageRenderError(TrackerError):
    """Headless browser failed to load or evaluate the page."""
