"""Decoded on-chain account records.

Addresses are kept as base58 strings, the form the JSON-RPC node accepts
back for follow-up lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ProposalState(IntEnum):
    PENDING = 0
    PASSED = 1
    FAILED = 2
    EXECUTED = 3

    @classmethod
    def label_for(cls, raw: int) -> str:
        """Human label for a raw state byte; unknown variants map to "Unknown"."""
        try:
            return cls(raw).name.capitalize()
        except ValueError:
            return "Unknown"


@dataclass(frozen=True)
class ProposalAccount:
    """Futarchy proposal account."""

    number: int
    proposer: str
    timestamp_enqueued: int
    state: int
    base_vault: str
    quote_vault: str
    dao: str
    pda_bump: int
    question: str
    duration_in_seconds: int
    squads_proposal: str
    pass_base_mint: str
    pass_quote_mint: str
    fail_base_mint: str
    fail_quote_mint: str
    is_team_sponsored: bool

    @property
    def state_label(self) -> str:
        return ProposalState.label_for(self.state)


@dataclass(frozen=True)
class QuestionAccount:
    """Conditional question; points at the pass and fail liquidity pools."""

    pass_amm: str
    fail_amm: str


@dataclass(frozen=True)
class AmmReserves:
    base_reserves: int
    quote_reserves: int
