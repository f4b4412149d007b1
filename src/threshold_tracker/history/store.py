"""ThresholdHistoryStore backends.

Only one proposal is tracked at a time: appending a snapshot for a
different proposal discards the stored series and starts over. The series
is capped at ``max_entries`` (a week of hourly samples by default), oldest
entries dropped first.

Neither backend locks across processes. The JSON file store assumes a
single scheduler; the SQL store performs its read-modify-write in one
transaction, which serializes writers only on a database that honours
``SELECT ... FOR UPDATE``.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from threshold_tracker.config.schema import HistoryConfig
from threshold_tracker.db.engine import create_session_factory, init_engine
from threshold_tracker.db.tables.history import HistoryEntryRow
from threshold_tracker.errors import TrackerError
from threshold_tracker.logging import get_logger
from threshold_tracker.models import HistoryEntry, ProposalSnapshot, ThresholdHistory

log = get_logger(__name__)

MAX_HISTORY_ENTRIES = 168


def apply_append(
    history: ThresholdHistory | None,
    snapshot: ProposalSnapshot,
    max_entries: int = MAX_HISTORY_ENTRIES,
) -> ThresholdHistory:
    """Return *history* with *snapshot* appended, reset and trimmed as needed."""
    if history is None or history.proposal_pubkey != snapshot.proposal_pubkey:
        if history is not None:
            log.info(
                "history_reset",
                previous=history.proposal_pubkey,
                current=snapshot.proposal_pubkey,
                dropped=len(history.entries),
            )
        entries: tuple[HistoryEntry, ...] = ()
    else:
        entries = history.entries

    entries = (*entries, HistoryEntry.from_snapshot(snapshot))[-max_entries:]
    return ThresholdHistory(proposal_pubkey=snapshot.proposal_pubkey, entries=entries)


class HistoryStore(ABC):
    """Owns the persisted ThresholdHistory; nothing else writes it."""

    max_entries: int = MAX_HISTORY_ENTRIES

    @abstractmethod
    def load(self) -> ThresholdHistory | None:
        """Stored history, or None if absent or unreadable."""
        ...

    @abstractmethod
    def append(self, snapshot: ProposalSnapshot) -> ThresholdHistory:
        """Record *snapshot* and return the resulting history."""
        ...


class JsonHistoryStore(HistoryStore):
    """Single JSON document on disk, replaced atomically on every write."""

    def __init__(self, path: str | Path, max_entries: int = MAX_HISTORY_ENTRIES) -> None:
        self.path = Path(path)
        self.max_entries = max_entries

    def load(self) -> ThresholdHistory | None:
        if not self.path.exists():
            return None
        try:
            return ThresholdHistory.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, ValueError) as exc:
            log.warning("history_unreadable", path=str(self.path), error=str(exc))
            return None

    def save(self, history: ThresholdHistory) -> None:
        payload = history.model_dump_json(by_alias=True, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def append(self, snapshot: ProposalSnapshot) -> ThresholdHistory:
        history = apply_append(self.load(), snapshot, self.max_entries)
        try:
            self.save(history)
        except OSError:
            # The report can still be built from the in-memory history.
            log.exception("history_save_failed", path=str(self.path))
        return history


class SqlHistoryStore(HistoryStore):
    """One row per entry in ``threshold_history_entries``."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        max_entries: int = MAX_HISTORY_ENTRIES,
    ) -> None:
        self._sessions = session_factory
        self.max_entries = max_entries

    @staticmethod
    def _read(session: Session) -> ThresholdHistory | None:
        latest = session.scalars(
            select(HistoryEntryRow).order_by(HistoryEntryRow.id.desc()).limit(1)
        ).first()
        if latest is None:
            return None
        rows = session.scalars(
            select(HistoryEntryRow)
            .where(HistoryEntryRow.proposal_pubkey == latest.proposal_pubkey)
            .order_by(HistoryEntryRow.id)
        ).all()
        return ThresholdHistory(
            proposal_pubkey=latest.proposal_pubkey,
            entries=tuple(
                HistoryEntry(
                    timestamp=r.ts,
                    threshold=r.threshold,
                    pass_price=r.pass_price,
                    fail_price=r.fail_price,
                )
                for r in rows
            ),
        )

    def load(self) -> ThresholdHistory | None:
        try:
            with self._sessions() as session:
                return self._read(session)
        except SQLAlchemyError as exc:
            log.warning("history_unreadable", error=str(exc))
            return None

    def _write(self, snapshot: ProposalSnapshot) -> ThresholdHistory:
        pubkey = snapshot.proposal_pubkey
        with self._sessions.begin() as session:
            # Row locks on databases that support them; a no-op on SQLite.
            session.execute(select(HistoryEntryRow.id).with_for_update()).all()

            session.execute(delete(HistoryEntryRow).where(HistoryEntryRow.proposal_pubkey != pubkey))
            session.add(HistoryEntryRow(
                proposal_pubkey=pubkey,
                ts=snapshot.timestamp,
                threshold=snapshot.threshold,
                pass_price=snapshot.pass_price,
                fail_price=snapshot.fail_price,
            ))
            session.flush()

            stale_ids = session.scalars(
                select(HistoryEntryRow.id)
                .where(HistoryEntryRow.proposal_pubkey == pubkey)
                .order_by(HistoryEntryRow.id.desc())
                .offset(self.max_entries)
            ).all()
            if stale_ids:
                session.execute(delete(HistoryEntryRow).where(HistoryEntryRow.id.in_(stale_ids)))

            history = self._read(session)

        if history is None:
            raise TrackerError("history empty after insert", context={"proposal": pubkey})
        return history

    def append(self, snapshot: ProposalSnapshot) -> ThresholdHistory:
        try:
            return self._write(snapshot)
        except SQLAlchemyError:
            # The report can still be built from the in-memory history.
            log.exception("history_save_failed", proposal=snapshot.proposal_pubkey)
            return apply_append(self.load(), snapshot, self.max_entries)


def build_history_store(config: HistoryConfig) -> HistoryStore:
    """Construct the configured backend."""
    if config.backend == "sql":
        engine = init_engine(config.database_url)
        return SqlHistoryStore(create_session_factory(engine), max_entries=config.max_entries)
    return JsonHistoryStore(config.path, max_entries=config.max_entries)
