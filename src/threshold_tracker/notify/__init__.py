"""Report delivery."""

from threshold_tracker.notify.telegram import Notifier, TelegramNotifier

__all__ = ["Notifier", "TelegramNotifier"]
