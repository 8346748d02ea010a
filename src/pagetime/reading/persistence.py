"""Debounced, coalescing persistence for reading ledgers.

Ledger merges request a save; requests arriving within the debounce window
collapse into a single write of the latest snapshot. A write in flight is
never duplicated: requests made while it runs schedule exactly one
follow-up write. Failed writes are retried with exponential backoff, and
the in-memory ledger stays authoritative throughout.

Writes run in a worker thread so the event loop (and the timer ticking on
it) never waits on the store. Outside a running event loop a request only
marks the ledger dirty; the host writes it with :meth:`DebouncedPersister.flush`.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Optional, Protocol

from ..errors import PersistenceError

logger = logging.getLogger("pagetime.persist")


class LedgerStore(Protocol):
    """Load/save contract for a document's page -> seconds map."""

    def load(self, document_id: str) -> Mapping[int, float]:
        """Return the stored map, or an empty map if none exists."""
        ...

    def save(self, document_id: str, pages: Mapping[int, float]) -> None:
        """Idempotently upsert the full map. Raises PersistenceError on failure."""
        ...


class DebouncedPersister:
    """Coalesces save requests for one document into debounced writes."""

    def __init__(
        self,
        store: LedgerStore,
        document_id: str,
        snapshot: Callable[[], Mapping[int, float]],
        window: float = 1.0,
        max_retries: int = 5,
        retry_delay: float = 1.0,
    ):
        """Initialize persister.

        Args:
            store: Store the ledger is written to
            document_id: Document the ledger belongs to
            snapshot: Callable returning the current ledger contents
            window: Debounce window in seconds
            max_retries: Consecutive failures retried automatically
            retry_delay: Initial backoff delay in seconds
        """
        self.store = store
        self.document_id = document_id
        self.window = window
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._snapshot = snapshot

        self._handle: Optional[asyncio.TimerHandle] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._dirty = False

        self.writes = 0
        self.failures = 0

    @property
    def dirty(self) -> bool:
        """Whether the ledger has changes not yet durably written."""
        return self._dirty

    @property
    def pending(self) -> bool:
        """Whether a write is scheduled or running."""
        return self._handle is not None or self._in_flight is not None

    def request(self) -> None:
        """Ask for the ledger to be written."""
        self._dirty = True

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return

        if self._in_flight is not None:
            # The running write re-checks the dirty flag when it finishes
            return
        self._schedule(self.window)

    def flush(self) -> bool:
        """Write outstanding changes synchronously, blocking on the store.

        For hosts without an event loop; inside one use :meth:`drain`.

        Returns:
            True if the ledger is durably written afterwards
        """
        if not self._dirty:
            return True
        return self._write_now()

    async def drain(self) -> bool:
        """Write any outstanding changes now and wait for completion.

        Keeps writing until the latest snapshot is stored, so requests made
        while draining are included.

        Returns:
            True if the ledger is durably written afterwards
        """
        while True:
            self._cancel_scheduled()
            if self._in_flight is not None:
                await self._in_flight
                continue
            if not self._dirty:
                return True

            task = asyncio.get_running_loop().create_task(self._write_tracked())
            self._in_flight = task
            if not await task:
                self._cancel_scheduled()
                return False

    def _schedule(self, delay: float) -> None:
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._start_write)

    def _cancel_scheduled(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _start_write(self) -> None:
        self._handle = None
        loop = asyncio.get_running_loop()
        self._in_flight = loop.create_task(self._run())

    async def _run(self) -> None:
        ok = await self._write_tracked()
        if ok:
            if self._dirty:
                self._schedule(self.window)
        elif self.failures <= self.max_retries:
            delay = self.retry_delay * 2 ** (self.failures - 1)
            logger.info("Retrying save of %s in %.1fs", self.document_id, delay)
            self._schedule(delay)
        else:
            logger.error(
                "Giving up automatic saves of %s after %d failures; "
                "will retry on the next change",
                self.document_id,
                self.failures,
            )

    async def _write_tracked(self) -> bool:
        try:
            return await self._write()
        finally:
            self._in_flight = None

    async def _write(self) -> bool:
        pages = dict(self._snapshot())
        self._dirty = False
        try:
            await asyncio.to_thread(self.store.save, self.document_id, pages)
        except PersistenceError as e:
            return self._record_failure(e)
        return self._record_success(pages)

    def _write_now(self) -> bool:
        pages = dict(self._snapshot())
        self._dirty = False
        try:
            self.store.save(self.document_id, pages)
        except PersistenceError as e:
            return self._record_failure(e)
        return self._record_success(pages)

    def _record_success(self, pages: Mapping[int, float]) -> bool:
        self.writes += 1
        self.failures = 0
        logger.debug("Persisted %d page(s) for %s", len(pages), self.document_id)
        return True

    def _record_failure(self, error: PersistenceError) -> bool:
        self._dirty = True
        self.failures += 1
        logger.warning(
            "Saving ledger for %s failed (attempt %d): %s",
            self.document_id,
            self.failures,
            error,
        )
        return False
