"""Database layer — engine, session, ORM base."""

from threshold_tracker.db.base import Base
from threshold_tracker.db.engine import create_session_factory, init_engine

__all__ = ["Base", "create_session_factory", "init_engine"]
