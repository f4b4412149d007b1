"""ReportBuilder — current threshold against the sample from an hour ago."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from threshold_tracker.models import HistoryEntry, ProposalSnapshot, ThresholdHistory, ThresholdReport

DEFAULT_LOOKBACK = timedelta(hours=1)
DEFAULT_TOLERANCE = timedelta(minutes=10)


def find_previous_entry(
    entries: Iterable[HistoryEntry],
    now: datetime,
    lookback: timedelta = DEFAULT_LOOKBACK,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> HistoryEntry | None:
    """Entry closest to ``now - lookback``, if one lies within *tolerance*.

    Entries are scanned in stored order; on equal distance the earlier
    entry wins.
    """
    target = now - lookback
    best: HistoryEntry | None = None
    best_diff = tolerance
    for entry in entries:
        diff = abs(entry.timestamp - target)
        if diff < best_diff:
            best, best_diff = entry, diff
    return best


def build_report(
    snapshot: ProposalSnapshot,
    history: ThresholdHistory | None,
    *,
    lookback: timedelta = DEFAULT_LOOKBACK,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> ThresholdReport:
    """Build the report for *snapshot*.

    Finalized proposals have closed markets, so no comparison against
    history is made for them; the live fields are still filled in.
    """
    is_finalized = snapshot.is_finalized
    previous_hour: float | None = None
    variation: float | None = None
    variation_percent: float | None = None

    if (
        not is_finalized
        and history is not None
        and history.proposal_pubkey == snapshot.proposal_pubkey
    ):
        previous = find_previous_entry(history.entries, snapshot.timestamp, lookback, tolerance)
        if previous is not None:
            previous_hour = previous.threshold
            variation = snapshot.threshold - previous_hour
            if previous_hour != 0:
                variation_percent = variation / abs(previous_hour) * 100

    return ThresholdReport(
        current=snapshot.threshold,
        previous_hour=previous_hour,
        variation=variation,
        variation_percent=variation_percent,
        pass_price=snapshot.pass_price,
        fail_price=snapshot.fail_price,
        timestamp=snapshot.timestamp,
        status=snapshot.status,
        is_finalized=is_finalized,
    )
