"""Threshold history persistence."""

from threshold_tracker.history.store import (
    MAX_HISTORY_ENTRIES,
    HistoryStore,
    JsonHistoryStore,
    SqlHistoryStore,
    apply_append,
    build_history_store,
)

__all__ = [
    "MAX_HISTORY_ENTRIES",
    "HistoryStore",
    "JsonHistoryStore",
    "SqlHistoryStore",
    "apply_append",
    "build_history_store",
]
