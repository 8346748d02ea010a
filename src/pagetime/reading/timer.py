"""Session timer.

Owns the :class:`TimerState` for one document view and applies the pure
transitions from :mod:`.state`, merging each transition's flush into the
ledger before installing the next state.
"""

import logging
import time
from collections.abc import Callable
from typing import Optional

from . import state as fsm
from .ledger import ReadingLedger
from .state import TimerState, TimerStatus

logger = logging.getLogger("pagetime.timer")

Clock = Callable[[], float]


class SessionTimer:
    """Accumulates time against the page currently being viewed."""

    def __init__(
        self,
        ledger: ReadingLedger,
        clock: Clock = time.monotonic,
        auto_flush_seconds: Optional[float] = fsm.AUTO_FLUSH_SECONDS,
    ):
        """Initialize timer.

        Args:
            ledger: Ledger flushed seconds are merged into
            clock: Returns the current time in seconds
            auto_flush_seconds: Elapsed seconds that trigger a flush on tick;
                                None or 0 disables automatic flushing
        """
        self.ledger = ledger
        self.clock = clock
        self.auto_flush_seconds = auto_flush_seconds
        self._state = TimerState()

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def status(self) -> TimerStatus:
        return self._state.status

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def elapsed(self) -> float:
        """Live unflushed seconds on the current page."""
        return fsm.live_elapsed(self._state, self.clock())

    def page_total(self, page: Optional[int] = None) -> float:
        """Ledger seconds for a page plus any unflushed time on it."""
        page = page or self._state.current_page
        total = self.ledger.page_seconds(page)
        if page == self._state.current_page:
            total += self.elapsed
        return total

    def _apply(self, transition: fsm.Transition) -> TimerState:
        if transition.flushed is not None:
            page, seconds = transition.flushed
            self.ledger.merge(page, seconds)
            logger.debug("Flushed %.2fs to page %d of %s", seconds, page, self.ledger.document_id)
        self._state = transition.state
        return self._state

    def start(self, page: int) -> TimerState:
        return self._apply(fsm.start(self._state, page, self.clock()))

    def tick(self) -> TimerState:
        return self._apply(fsm.tick(self._state, self.clock(), self.auto_flush_seconds))

    def pause(self) -> TimerState:
        return self._apply(fsm.pause(self._state, self.clock()))

    def resume(self) -> TimerState:
        return self._apply(fsm.resume(self._state, self.clock()))

    def switch_page(self, new_page: int) -> TimerState:
        return self._apply(fsm.switch_page(self._state, new_page, self.clock()))

    def flush_and_stop(self) -> TimerState:
        return self._apply(fsm.flush_and_stop(self._state, self.clock()))
