"""Per-page reading time ledger.

The ledger is the authoritative page -> seconds map for one document.
``merge`` is its only mutator; every merge asks the persister to save,
and the persister coalesces those requests into debounced writes.
"""

import logging
import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from ..config import Config
from ..db.schemas import validate_page_times
from ..errors import InvalidPageTimeError, LedgerStateError
from .persistence import DebouncedPersister, LedgerStore

logger = logging.getLogger("pagetime.ledger")


def check_page(page: int) -> int:
    """Validate a 1-based page number."""
    if isinstance(page, bool) or not isinstance(page, int):
        raise InvalidPageTimeError(f"Page must be an integer, got {page!r}")
    if page < 1:
        raise InvalidPageTimeError(f"Page must be >= 1, got {page}")
    return page


def check_seconds(seconds: float) -> float:
    """Validate a non-negative, finite number of seconds."""
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise InvalidPageTimeError(f"Seconds must be a number, got {seconds!r}")
    if not math.isfinite(seconds) or seconds < 0:
        raise InvalidPageTimeError(f"Seconds must be finite and >= 0, got {seconds}")
    return float(seconds)


class ReadingLedger:
    """Accumulated seconds per page for a single document."""

    def __init__(
        self,
        document_id: str,
        store: Optional[LedgerStore] = None,
        debounce: float = 1.0,
        max_retries: int = 5,
        retry_delay: float = 1.0,
    ):
        """Initialize ledger.

        Args:
            document_id: Document this ledger belongs to
            store: Store to hydrate from and persist to; None keeps the
                   ledger in memory only
            debounce: Debounce window for saves, in seconds
            max_retries: Consecutive failed saves retried automatically
            retry_delay: Initial retry backoff, in seconds
        """
        self.document_id = document_id
        self.store = store
        self._pages: dict[int, float] = {}
        self._hydrated = False
        self._merge_count = 0
        self._persister: Optional[DebouncedPersister] = None

        if store is not None:
            self._persister = DebouncedPersister(
                store,
                document_id,
                self.snapshot,
                window=debounce,
                max_retries=max_retries,
                retry_delay=retry_delay,
            )

    @classmethod
    def from_config(
        cls, document_id: str, store: Optional[LedgerStore], config: Config
    ) -> "ReadingLedger":
        """Create a ledger using the persistence settings from config."""
        return cls(
            document_id,
            store,
            debounce=config.persist_debounce,
            max_retries=config.persist_retry_max,
            retry_delay=config.persist_retry_delay,
        )

    @property
    def persister(self) -> Optional[DebouncedPersister]:
        return self._persister

    @property
    def pages_sampled(self) -> int:
        """Number of pages with recorded time."""
        return sum(1 for seconds in self._pages.values() if seconds > 0)

    @property
    def total_seconds(self) -> float:
        return sum(self._pages.values())

    def page_seconds(self, page: int) -> float:
        """Seconds recorded for a page (0 if never timed)."""
        return self._pages.get(page, 0.0)

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, page: object) -> bool:
        return page in self._pages

    def hydrate(self, initial: Optional[Mapping[int, float]] = None) -> Mapping[int, float]:
        """Load prior reading history into the ledger.

        Must be called at most once, before any merge. When ``initial`` is
        None the ledger's store is consulted.

        Returns:
            Snapshot of the hydrated ledger

        Raises:
            LedgerStateError: If already hydrated or merged into
            PersistenceError: If the store cannot be read
        """
        if self._hydrated:
            raise LedgerStateError(f"Ledger for {self.document_id} is already hydrated")
        if self._merge_count:
            raise LedgerStateError(
                f"Ledger for {self.document_id} cannot be hydrated after a merge"
            )

        if initial is None:
            initial = self.store.load(self.document_id) if self.store is not None else {}

        self._pages = validate_page_times(initial)
        self._hydrated = True
        logger.debug("Hydrated %s with %d page(s)", self.document_id, len(self._pages))
        return self.snapshot()

    def merge(self, page: int, delta_seconds: float) -> float:
        """Add seconds to a page.

        Zero deltas are accepted and ignored.

        Returns:
            The page's new total

        Raises:
            InvalidPageTimeError: If page < 1 or delta is negative
        """
        check_page(page)
        delta = check_seconds(delta_seconds)
        if delta == 0:
            return self._pages.get(page, 0.0)

        self._pages[page] = self._pages.get(page, 0.0) + delta
        self._merge_count += 1
        self.persist()
        return self._pages[page]

    def snapshot(self) -> Mapping[int, float]:
        """Read-only copy of the current page -> seconds map."""
        return MappingProxyType(dict(self._pages))

    def persist(self) -> None:
        """Request a (debounced) save of the ledger."""
        if self._persister is not None:
            self._persister.request()

    def flush(self) -> bool:
        """Write outstanding changes now, blocking. Returns True if fully persisted."""
        if self._persister is None:
            return True
        return self._persister.flush()

    async def drain(self) -> bool:
        """Write outstanding changes now. Returns True if fully persisted."""
        if self._persister is None:
            return True
        return await self._persister.drain()
