"""Source registry — decorated classes are auto-registered."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from threshold_tracker.sources.base import Source

SOURCE_REGISTRY: dict[str, type[Source]] = {}


def register(cls: type[Source]) -> type[Source]:
    """Class decorator that adds a source to the global registry."""
    if not getattr(cls, "name", None):
        raise ValueError(f"Source class {cls.__name__} must define a 'name' attribute")
    if cls.name in SOURCE_REGISTRY:
        raise ValueError(f"Duplicate source name: {cls.name!r}")
    if not isinstance(getattr(cls, "priority", None), int):
        raise ValueError(f"Source class {cls.__name__} must define an integer 'priority'")
    SOURCE_REGISTRY[cls.name] = cls
    return cls


def ordered_sources() -> list[type[Source]]:
    """Registered source classes, lowest priority number first."""
    return sorted(SOURCE_REGISTRY.values(), key=lambda cls: cls.priority)
