"""Shared test fixtures."""

import pytest

from threshold_tracker.db import create_session_factory, init_engine


@pytest.fixture
def session_factory(tmp_path):
    """Session factory bound to a throwaway SQLite file with tables created."""
    engine = init_engine(f"sqlite:///{tmp_path / 'history.db'}")
    yield create_session_factory(engine)
    engine.dispose()
