"""Proposal snapshot, threshold history and report models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FINALIZED_STATUSES = frozenset({"passed", "failed", "executed"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _assume_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# Naive timestamps (SQLite, hand-edited files) are taken to be UTC.
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class ProposalSnapshot(BaseModel):
    """One normalized reading of a proposal, produced by exactly one source."""

    model_config = ConfigDict(frozen=True)

    proposal_pubkey: str
    pass_price: float
    fail_price: float
    pass_twap: float
    fail_twap: float
    threshold: float
    status: str
    timestamp: UtcDatetime = Field(default_factory=utcnow)
    source: str = ""

    @property
    def is_finalized(self) -> bool:
        return self.status.lower() in FINALIZED_STATUSES


class Unavailable(BaseModel):
    """Every source came back empty this cycle."""

    model_config = ConfigDict(frozen=True)

    attempted: tuple[str, ...] = ()
    timestamp: datetime = Field(default_factory=utcnow)


FetchResult = ProposalSnapshot | Unavailable


class HistoryEntry(BaseModel):
    """Projection of a snapshot kept in the threshold history."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    timestamp: UtcDatetime
    threshold: float
    pass_price: float
    fail_price: float

    @classmethod
    def from_snapshot(cls, snapshot: ProposalSnapshot) -> HistoryEntry:
        return cls(
            timestamp=snapshot.timestamp,
            threshold=snapshot.threshold,
            pass_price=snapshot.pass_price,
            fail_price=snapshot.fail_price,
        )


class ThresholdHistory(BaseModel):
    """Bounded series of entries for a single proposal, oldest first."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    proposal_pubkey: str = Field(alias="proposalIdentity")
    entries: tuple[HistoryEntry, ...] = ()


class ThresholdReport(BaseModel):
    """Read-only view handed to the delivery layer; never persisted."""

    model_config = ConfigDict(frozen=True)

    current: float
    previous_hour: float | None = None
    variation: float | None = None
    variation_percent: float | None = None
    pass_price: float
    fail_price: float
    timestamp: datetime
    status: str
    is_finalized: bool = False
