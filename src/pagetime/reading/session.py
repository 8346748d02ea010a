"""Reading session management.

A :class:`ReadingSession` is one open view of a document: a hydrated
ledger, the timer writing into it, and the navigation, visibility and
teardown events that drive the timer.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional

from ..config import Config, get_config
from ..errors import InvalidPageTimeError
from ..stats.estimates import EstimationSnapshot, estimate
from .ledger import ReadingLedger, check_page
from .persistence import LedgerStore
from .state import TimerStatus
from .timer import Clock, SessionTimer

logger = logging.getLogger("pagetime.session")


class ReadingSession:
    """An open, timed view of one document."""

    def __init__(self, document_id: str, total_pages: int, ledger: ReadingLedger, timer: SessionTimer):
        """Initialize session.

        Prefer :meth:`open`, which hydrates the ledger and starts the timer.
        """
        if isinstance(total_pages, bool) or not isinstance(total_pages, int) or total_pages < 1:
            raise InvalidPageTimeError(f"Document must have at least one page, got {total_pages!r}")

        self.document_id = document_id
        self.total_pages = total_pages
        self.ledger = ledger
        self.timer = timer
        self._manually_paused = False
        self._hidden = False
        self._closed = False

    @classmethod
    def open(
        cls,
        document_id: str,
        total_pages: int,
        store: Optional[LedgerStore] = None,
        page: int = 1,
        clock: Clock = time.monotonic,
        config: Optional[Config] = None,
    ) -> "ReadingSession":
        """Open a document view and start timing ``page``.

        Args:
            document_id: Document being read
            total_pages: Pages in the document
            store: Store holding prior reading history (None: in memory)
            page: Page the view opens on
            clock: Time source for the timer
            config: Timer and persistence settings (default: global config)

        Raises:
            InvalidPageTimeError: If the page is outside the document
            PersistenceError: If prior history cannot be loaded
        """
        config = config or get_config()
        ledger = ReadingLedger.from_config(document_id, store, config)
        ledger.hydrate()
        timer = SessionTimer(ledger, clock=clock, auto_flush_seconds=config.auto_flush_seconds)

        session = cls(document_id, total_pages, ledger, timer)
        session._check_in_document(page)
        timer.start(page)
        logger.info("Opened %s at page %d of %d", document_id, page, total_pages)
        return session

    @property
    def current_page(self) -> int:
        return self.timer.current_page

    @property
    def status(self) -> TimerStatus:
        return self.timer.status

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def hidden(self) -> bool:
        return self._hidden

    def _check_in_document(self, page: int) -> None:
        check_page(page)
        if page > self.total_pages:
            raise InvalidPageTimeError(
                f"Page {page} is outside {self.document_id} (1-{self.total_pages})"
            )

    def go_to(self, page: int) -> bool:
        """Navigate to a page.

        Pages outside the document, and the page already shown, are ignored.

        Returns:
            True if the view moved
        """
        if self._closed or page == self.current_page:
            return False
        if isinstance(page, bool) or not isinstance(page, int) or not 1 <= page <= self.total_pages:
            logger.debug("Ignoring navigation to page %r of %s", page, self.document_id)
            return False

        self.timer.switch_page(page)
        return True

    def next_page(self) -> bool:
        return self.go_to(min(self.current_page + 1, self.total_pages))

    def prev_page(self) -> bool:
        return self.go_to(max(self.current_page - 1, 1))

    def set_hidden(self, hidden: bool) -> None:
        """Handle the view being hidden (tab switch) or shown again.

        Hiding pauses the timer; showing resumes it unless the reader
        paused manually.
        """
        if self._closed:
            return
        self._hidden = hidden
        if hidden:
            self.timer.pause()
            self._save()
        elif not self._manually_paused:
            self.timer.resume()

    def toggle(self) -> TimerStatus:
        """Manually pause or resume timing."""
        if self._closed:
            return self.status
        if self.timer.is_running:
            self._manually_paused = True
            self.timer.pause()
        else:
            self._manually_paused = False
            if not self._hidden:
                self.timer.resume()
        return self.status

    def tick(self) -> None:
        self.timer.tick()

    def estimates(self, now: Optional[datetime] = None) -> EstimationSnapshot:
        """Current estimates from the ledger (flushed time only)."""
        return estimate(self.ledger.snapshot(), self.total_pages, self.current_page, now)

    def close(self) -> None:
        """Flush the timer and request a final save. Safe to call repeatedly."""
        self.timer.flush_and_stop()
        if self._closed:
            return
        self._closed = True
        self._save()
        logger.info(
            "Closed %s after %d page(s), %.0fs recorded",
            self.document_id,
            self.ledger.pages_sampled,
            self.ledger.total_seconds,
        )

    def _save(self) -> None:
        """Request a save, writing immediately when no event loop is running."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.ledger.flush()
            return
        self.ledger.persist()

    async def aclose(self) -> bool:
        """Close the session and wait for outstanding saves.

        Returns:
            True if the ledger was durably written
        """
        self.close()
        return await self.ledger.drain()


async def run_ticker(session: ReadingSession, interval: float = 1.0) -> None:
    """Tick a session's timer every ``interval`` seconds until it closes."""
    while not session.closed:
        await asyncio.sleep(interval)
        if not session.closed:
            session.tick()
