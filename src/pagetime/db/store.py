"""SQLite-backed ledger store.

Adapts :class:`Database` to the load/save contract used by the reading
ledger, turning driver errors into :class:`PersistenceError`.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import PersistenceError
from .sqlite import Database, get_db

logger = logging.getLogger("pagetime.store")


class DatabaseLedgerStore:
    """Loads and saves page-time ledgers in the local SQLite database."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def load(self, document_id: str) -> dict[int, float]:
        """Load a document's ledger, empty if it has never been saved."""
        try:
            return self.db.load_page_times(document_id)
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(f"Could not load ledger: {e}", document_id) from e

    def save(self, document_id: str, pages: Mapping[int, float]) -> None:
        """Upsert a document's full ledger."""
        try:
            changed = self.db.save_page_times(document_id, pages)
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(f"Could not save ledger: {e}", document_id) from e
        logger.debug("Saved ledger for %s (%d row(s) changed)", document_id, changed)
