"""Tests for the SQLite-backed ledger store."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from pagetime.db.sqlite import Database
from pagetime.db.store import DatabaseLedgerStore
from pagetime.errors import PersistenceError
from pagetime.reading.ledger import ReadingLedger


class TestDatabaseLedgerStore:
    """Tests for DatabaseLedgerStore."""

    def test_round_trip(self, db: Database):
        """Test a saved ledger loads back."""
        store = DatabaseLedgerStore(db)
        store.save("doc", {1: 12.0, 2: 30.0})

        assert store.load("doc") == {1: 12.0, 2: 30.0}

    def test_ledger_persists_through_store(self, db: Database):
        """Test a flushed ledger is written to the database."""
        ledger = ReadingLedger("doc", DatabaseLedgerStore(db))
        ledger.hydrate()
        ledger.merge(1, 15.0)
        ledger.merge(1, 5.0)
        assert db.load_page_times("doc") == {}

        assert ledger.flush()
        assert db.load_page_times("doc") == {1: 20.0}

    def test_second_ledger_sees_history(self, db: Database):
        """Test a new view hydrates from what the previous one saved."""
        first = ReadingLedger("doc", DatabaseLedgerStore(db))
        first.hydrate()
        first.merge(3, 40.0)
        first.flush()

        second = ReadingLedger("doc", DatabaseLedgerStore(db))
        assert dict(second.hydrate()) == {3: 40.0}

    def test_save_failure_raises_persistence_error(self):
        """Test driver errors on save become PersistenceError."""
        db = MagicMock()
        db.save_page_times.side_effect = OperationalError("UPDATE", {}, Exception("locked"))
        store = DatabaseLedgerStore(db)

        with pytest.raises(PersistenceError) as exc_info:
            store.save("doc", {1: 1.0})
        assert exc_info.value.document_id == "doc"

    def test_load_failure_raises_persistence_error(self):
        """Test driver errors on load become PersistenceError."""
        db = MagicMock()
        db.load_page_times.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(PersistenceError):
            DatabaseLedgerStore(db).load("doc")
