"""Proposal data sources."""

from threshold_tracker.sources.base import Source, SourceContext
from threshold_tracker.sources.registry import SOURCE_REGISTRY, ordered_sources, register

__all__ = ["SOURCE_REGISTRY", "Source", "SourceContext", "ordered_sources", "register"]
