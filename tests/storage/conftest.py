"""Pytest fixtures for storage tests."""

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker

from lineage_context.storage import create_session_factory


@pytest.fixture(scope="function")
def session_factory(tmp_path: Path) -> sessionmaker[Session]:
    """Create a file-backed SQLite metadata store for testing.

    Creates a fresh database for each test function.
    """
    return create_session_factory(f"sqlite:///{tmp_path / 'metadata.db'}")


@pytest.fixture
def session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Create a test database session."""
    with session_factory() as session:
        yield session
