"""Configuration system."""

from threshold_tracker.config.loader import load_config
from threshold_tracker.config.schema import AppConfig

__all__ = ["AppConfig", "load_config"]
