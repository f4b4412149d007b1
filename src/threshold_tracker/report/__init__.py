"""Threshold reports."""

from threshold_tracker.report.builder import build_report, find_previous_entry
from threshold_tracker.report.formatting import (
    format_price,
    format_report,
    format_threshold,
    format_unavailable,
)

__all__ = [
    "build_report",
    "find_previous_entry",
    "format_price",
    "format_report",
    "format_threshold",
    "format_unavailable",
]
