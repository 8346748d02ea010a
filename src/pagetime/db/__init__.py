"""Database module for local SQLite storage."""

from .models import PageTime
from .schemas import DocumentSummary, PageTimeEntry, validate_page_times
from .sqlite import Database, get_db
from .store import DatabaseLedgerStore

__all__ = [
    "PageTime",
    "DocumentSummary",
    "PageTimeEntry",
    "validate_page_times",
    "Database",
    "get_db",
    "DatabaseLedgerStore",
]
