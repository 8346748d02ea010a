"""SQLAlchemy ORM models for local SQLite database.

Tables:
- page_times: Accumulated seconds per (document, page)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now_iso() -> str:
    """Current UTC time as an ISO string."""
    return datetime.now(timezone.utc).isoformat()


class PageTime(Base):
    """Seconds a reader has spent on one page of one document."""

    __tablename__ = "page_times"
    __table_args__ = (
        UniqueConstraint("document_id", "page_number", name="uq_page_times_document_page"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    updated_at: Mapped[Optional[str]] = mapped_column(String(32), default=utc_now_iso)

    def __repr__(self) -> str:
        return f"<PageTime {self.document_id}#{self.page_number}: {self.seconds:.1f}s>"
