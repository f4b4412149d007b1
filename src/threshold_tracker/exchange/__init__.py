"""Upstream clients."""

from threshold_tracker.exchange.browser import PageRenderer, RenderedPage
from threshold_tracker.exchange.metadao import MetaDaoClient
from threshold_tracker.exchange.solana import SolanaRpcClient

__all__ = ["MetaDaoClient", "PageRenderer", "RenderedPage", "SolanaRpcClient"]
