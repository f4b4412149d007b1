"""FetchOrchestrator — run sources in priority order, first snapshot wins."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from threshold_tracker.errors import DataUnavailableError
from threshold_tracker.models import FetchResult, ProposalSnapshot, Unavailable
from threshold_tracker.sources import Source, SourceContext, ordered_sources

# Ensure all source modules are imported so @register fires
import threshold_tracker.sources.strategies  # noqa: F401

log = structlog.get_logger("fetcher")


def instantiate_sources(ctx: SourceContext, disabled: Iterable[str] = ()) -> list[Source]:
    """Build source instances in priority order, minus the disabled ones."""
    skip = set(disabled)
    instances: list[Source] = []
    for cls in ordered_sources():
        if cls.name in skip:
            log.info("source_disabled", source=cls.name)
            continue
        instances.append(cls(ctx))
    return instances


class FetchOrchestrator:
    """Short-circuiting cascade over an ordered list of sources."""

    def __init__(self, sources: Sequence[Source]) -> None:
        self.sources = list(sources)

    @classmethod
    def from_context(cls, ctx: SourceContext) -> FetchOrchestrator:
        return cls(instantiate_sources(ctx, ctx.settings.disabled))

    async def fetch(self) -> FetchResult:
        """Return the first snapshot any source produces, else Unavailable.

        Never raises: a source that blows up unexpectedly is logged and
        treated as having no data.
        """
        attempted: list[str] = []
        for source in self.sources:
            if not source.is_available():
                log.info("source_unavailable", source=source.name)
                continue

            attempted.append(source.name)
            try:
                snapshot = await source.fetch()
            except Exception:
                log.exception("source_error", source=source.name)
                continue

            if snapshot is not None:
                log.info(
                    "snapshot_acquired",
                    source=source.name,
                    threshold=snapshot.threshold,
                    status=snapshot.status,
                )
                return snapshot

        log.error("all_sources_failed", attempted=attempted)
        return Unavailable(attempted=tuple(attempted))

    async def require(self) -> ProposalSnapshot:
        """Like fetch(), but raise DataUnavailableError on exhaustion."""
        result = await self.fetch()
        if isinstance(result, Unavailable):
            raise DataUnavailableError(list(result.attempted))
        return result
