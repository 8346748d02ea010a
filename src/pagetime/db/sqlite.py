"""SQLite database operations.

Handles database connection, session management, and page-time storage.
"""

import os
from collections.abc import Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base, PageTime, utc_now_iso
from .schemas import DocumentSummary, validate_page_times


class Database:
    """Database connection and operations manager."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses
                     PAGETIME_DB_PATH env var or default location.
        """
        if db_path is None:
            db_path = os.environ.get(
                "PAGETIME_DB_PATH",
                str(Path.home() / ".pagetime" / "pagetime.db"),
            )

        self.db_path = Path(db_path).expanduser()
        self._is_memory = str(db_path) == ":memory:"

        if not self._is_memory:
            self._ensure_directory()

        # For in-memory databases, use StaticPool to reuse the same connection
        # This ensures all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ========================================================================
    # Page Time Operations
    # ========================================================================

    def load_page_times(
        self, document_id: str, session: Optional[Session] = None
    ) -> dict[int, float]:
        """Load the page -> seconds map for a document.

        Returns an empty dict when the document has never been timed.
        """

        def _load(s: Session) -> dict[int, float]:
            stmt = (
                select(PageTime)
                .where(PageTime.document_id == document_id)
                .order_by(PageTime.page_number)
            )
            return {row.page_number: row.seconds for row in s.execute(stmt).scalars()}

        if session:
            return _load(session)
        with self.get_session() as s:
            return _load(s)

    def save_page_times(
        self,
        document_id: str,
        pages: Mapping[int, float],
        session: Optional[Session] = None,
    ) -> int:
        """Upsert the full page -> seconds map for a document.

        Saving the same map twice leaves the table unchanged. Pages absent
        from the map are left as they are.

        Returns:
            Number of rows inserted or updated
        """
        validated = validate_page_times(pages)

        def _save(s: Session) -> int:
            stmt = select(PageTime).where(PageTime.document_id == document_id)
            existing = {row.page_number: row for row in s.execute(stmt).scalars()}
            now = utc_now_iso()
            changed = 0

            for page_number, seconds in validated.items():
                row = existing.get(page_number)
                if row is None:
                    s.add(
                        PageTime(
                            document_id=document_id,
                            page_number=page_number,
                            seconds=seconds,
                            updated_at=now,
                        )
                    )
                    changed += 1
                elif row.seconds != seconds:
                    row.seconds = seconds
                    row.updated_at = now
                    changed += 1

            return changed

        if session:
            return _save(session)
        with self.get_session() as s:
            return _save(s)

    def delete_page_times(self, document_id: str, session: Optional[Session] = None) -> int:
        """Delete a document's ledger. Returns number of rows removed."""

        def _delete(s: Session) -> int:
            result = s.execute(delete(PageTime).where(PageTime.document_id == document_id))
            return result.rowcount or 0

        if session:
            return _delete(session)
        with self.get_session() as s:
            return _delete(s)

    def list_documents(self, session: Optional[Session] = None) -> list[DocumentSummary]:
        """List every document with timing data, most recently updated first."""

        def _list(s: Session) -> list[DocumentSummary]:
            stmt = (
                select(
                    PageTime.document_id,
                    func.count(PageTime.id),
                    func.sum(PageTime.seconds),
                    func.max(PageTime.updated_at),
                )
                .group_by(PageTime.document_id)
                .order_by(func.max(PageTime.updated_at).desc())
            )
            return [
                DocumentSummary(
                    document_id=document_id,
                    pages_timed=count,
                    total_seconds=total or 0.0,
                    last_updated=last_updated,
                )
                for document_id, count, total, last_updated in s.execute(stmt).all()
            ]

        if session:
            return _list(session)
        with self.get_session() as s:
            return _list(s)


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
