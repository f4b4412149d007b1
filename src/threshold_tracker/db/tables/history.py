"""SQLAlchemy ORM model for threshold history entries."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from threshold_tracker.db.base import Base


class HistoryEntryRow(Base):
    __tablename__ = "threshold_history_entries"
    __table_args__ = (Index("ix_threshold_history_proposal_ts", "proposal_pubkey", "ts"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    proposal_pubkey: Mapped[str] = mapped_column(Text, nullable=False)
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    threshold: Mapped[float] = mapped_column(Float, nullable=False)
    pass_price: Mapped[float] = mapped_column(Float, nullable=False)
    fail_price: Mapped[float] = mapped_column(Float, nullable=False)
