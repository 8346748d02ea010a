"""Reading session timing and the per-page ledger."""

from .ledger import ReadingLedger, check_page, check_seconds
from .persistence import DebouncedPersister, LedgerStore
from .session import ReadingSession, run_ticker
from .state import AUTO_FLUSH_SECONDS, Flush, TimerState, TimerStatus, Transition
from .timer import SessionTimer

__all__ = [
    "ReadingLedger",
    "check_page",
    "check_seconds",
    "DebouncedPersister",
    "LedgerStore",
    "ReadingSession",
    "run_ticker",
    "AUTO_FLUSH_SECONDS",
    "Flush",
    "TimerState",
    "TimerStatus",
    "Transition",
    "SessionTimer",
]
