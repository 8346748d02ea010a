"""Pytest configuration and shared fixtures.

This module provides fixtures for testing pagetime, including temporary
databases, a controllable clock, and in-memory ledger stores.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from pagetime.config import Config, reset_config
from pagetime.db.sqlite import Database, reset_db
from pagetime.reading.ledger import ReadingLedger
from pagetime.reading.timer import SessionTimer
from tests.fakes import FakeClock, MemoryStore

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture(scope="function")
def db(temp_db_path: Path) -> Generator[Database, None, None]:
    """Create a test database instance."""
    # Reset any global state
    reset_db()
    reset_config()

    # Set environment variable for test database
    os.environ["PAGETIME_DB_PATH"] = str(temp_db_path)

    database = Database(str(temp_db_path))
    database.create_tables()
    yield database

    # Cleanup
    reset_db()
    if "PAGETIME_DB_PATH" in os.environ:
        del os.environ["PAGETIME_DB_PATH"]


@pytest.fixture
def config(temp_db_path: Path) -> Config:
    """Configuration with short persistence windows for tests."""
    return Config(
        db_path=temp_db_path,
        tick_interval=1.0,
        auto_flush_seconds=30.0,
        persist_debounce=0.05,
        persist_retry_max=2,
        persist_retry_delay=0.01,
        log_level="WARNING",
    )


# ============================================================================
# Clock and Store Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """A controllable clock."""
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    """An empty in-memory ledger store."""
    return MemoryStore()


@pytest.fixture
def ledger() -> ReadingLedger:
    """A hydrated, in-memory-only ledger."""
    ledger = ReadingLedger("doc-1")
    ledger.hydrate({})
    return ledger


@pytest.fixture
def timer(ledger: ReadingLedger, clock: FakeClock) -> SessionTimer:
    """A timer writing into the ``ledger`` fixture, driven by ``clock``."""
    return SessionTimer(ledger, clock=clock, auto_flush_seconds=30.0)


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()


@pytest.fixture
def cli_app():
    """Get the CLI app for testing."""
    from pagetime.cli import app
    return app
