"""Source abstract base class and the shared context sources draw on."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from threshold_tracker.config.schema import ProposalConfig, SourcesConfig
from threshold_tracker.decoding.reserves import HeuristicReserveDecoder, ReserveDecoder
from threshold_tracker.errors import TrackerError
from threshold_tracker.exchange.browser import PageRenderer
from threshold_tracker.exchange.metadao import MetaDaoClient
from threshold_tracker.exchange.solana import SolanaRpcClient
from threshold_tracker.logging import get_logger
from threshold_tracker.models import ProposalSnapshot

log = get_logger(__name__)

# Failures a source converts into "no data".
ABSORBED_ERRORS: tuple[type[BaseException], ...] = (
    TrackerError,
    httpx.HTTPError,
    asyncio.TimeoutError,
    ValueError,
    KeyError,
    TypeError,
)


@dataclass
class SourceContext:
    """Clients and settings handed to every source."""

    proposal: ProposalConfig
    settings: SourcesConfig
    metadao: MetaDaoClient
    solana: SolanaRpcClient
    renderer: PageRenderer
    reserve_decoder: ReserveDecoder = field(default_factory=HeuristicReserveDecoder)
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    @property
    def proposal_url(self) -> str:
        return self.metadao.proposal_url(self.proposal.project_slug, self.proposal.pubkey)


class Source(ABC):
    """Base class for proposal data sources.

    Subclasses set ``name`` and ``priority`` (lower runs first) and
    implement ``_fetch()``. ``fetch()`` never raises for expected upstream
    failures; it logs them and returns None.
    """

    name: str
    priority: int

    def __init__(self, ctx: SourceContext) -> None:
        self.ctx = ctx
        self.log = log.bind(source=self.name)

    def is_available(self) -> bool:
        """False when the runtime cannot host this source at all."""
        return True

    async def fetch(self) -> ProposalSnapshot | None:
        try:
            snapshot = await self._fetch()
        except ABSORBED_ERRORS as exc:
            self.log.warning(
                "source_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                **getattr(exc, "context", {}),
            )
            return None
        if snapshot is None:
            self.log.info("source_no_data")
        return snapshot

    @abstractmethod
    async def _fetch(self) -> ProposalSnapshot | None:
        ...

    def _snapshot(self, **fields: Any) -> ProposalSnapshot:
        fields.setdefault("proposal_pubkey", self.ctx.proposal.pubkey)
        return ProposalSnapshot(source=self.name, **fields)
