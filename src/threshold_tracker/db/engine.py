"""Database engine and session factory."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from threshold_tracker.db.base import Base


def _ensure_psycopg_driver(url: str) -> str:
    """Rewrite postgresql:// to postgresql+psycopg:// for psycopg v3."""
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def init_engine(url: str, create_tables: bool = True, **kwargs) -> Engine:
    """Create an engine and, by default, the history table."""
    engine = create_engine(_ensure_psycopg_driver(url), **kwargs)
    if create_tables:
        # Register tables on Base.metadata before create_all.
        import threshold_tracker.db.tables  # noqa: F401

        Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)
