"""ORM tables."""

from threshold_tracker.db.tables.history import HistoryEntryRow

__all__ = ["HistoryEntryRow"]
