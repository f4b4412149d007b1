"""Domain models."""

from threshold_tracker.models.accounts import (
    AmmReserves,
    ProposalAccount,
    ProposalState,
    QuestionAccount,
)
from threshold_tracker.models.proposal import (
    FetchResult,
    HistoryEntry,
    ProposalSnapshot,
    ThresholdHistory,
    ThresholdReport,
    Unavailable,
)

__all__ = [
    "AmmReserves",
    "FetchResult",
    "HistoryEntry",
    "ProposalAccount",
    "ProposalSnapshot",
    "ProposalState",
    "QuestionAccount",
    "ThresholdHistory",
    "ThresholdReport",
    "Unavailable",
]
