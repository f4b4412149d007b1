"""Governance token spot price, logged for context.

Never yields a snapshot: spot price says nothing about the pass/fail
markets.
"""

from __future__ import annotations

from threshold_tracker.models import ProposalSnapshot
from threshold_tracker.sources.base import Source
from threshold_tracker.sources.registry import register


def find_ticker(tickers: list[dict], symbol: str) -> dict | None:
    for ticker in tickers:
        if ticker.get("base_symbol") == symbol:
            return ticker
    return None


@register
class MarketContextSource(Source):
    name = "market_context"
    priority = 50

    async def _fetch(self) -> ProposalSnapshot | None:
        symbol = self.ctx.proposal.governance_symbol
        ticker = find_ticker(await self.ctx.metadao.get_tickers(), symbol)
        if ticker is not None:
            self.log.info("market_context", symbol=symbol, last_price=ticker.get("last_price"))
        else:
            self.log.info("market_context_missing", symbol=symbol)
        return None
