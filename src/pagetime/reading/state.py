"""Timer state and its pure transition functions.

Each transition takes a :class:`TimerState` and the current clock reading
and returns a :class:`Transition`: the next state plus the seconds that
must be merged into the ledger before that state is installed. Whenever a
transition zeroes the elapsed count it returns those seconds as a
``Flush``; a transition never drops them.

Running time is always advanced up to ``now`` before a flush, so time
between the last tick and a pause or page change is counted.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional

from .ledger import check_page

AUTO_FLUSH_SECONDS = 30.0


class TimerStatus(str, Enum):
    """Status of a session timer."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class TimerState:
    """Timer for one document view.

    ``current_page`` is 0 until a page has been started.
    """

    status: TimerStatus = TimerStatus.IDLE
    current_page: int = 0
    elapsed: float = 0.0  # unflushed seconds on current_page
    last_tick_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self.status is TimerStatus.RUNNING


class Flush(NamedTuple):
    """Seconds to merge into the ledger for a page."""

    page: int
    seconds: float


class Transition(NamedTuple):
    """Result of a transition: next state and any pending flush."""

    state: TimerState
    flushed: Optional[Flush] = None


def advance(state: TimerState, now: float) -> TimerState:
    """Accumulate wall-clock time since the last tick.

    A clock reading earlier than ``last_tick_at`` adds nothing.
    """
    if not state.is_running or state.last_tick_at is None:
        return state
    delta = max(now - state.last_tick_at, 0.0)
    return replace(state, elapsed=state.elapsed + delta, last_tick_at=now)


def drain(state: TimerState) -> Transition:
    """Zero the elapsed count, handing the seconds back as a flush."""
    if state.elapsed <= 0:
        return Transition(replace(state, elapsed=0.0))
    return Transition(
        replace(state, elapsed=0.0),
        Flush(state.current_page, state.elapsed),
    )


def live_elapsed(state: TimerState, now: float) -> float:
    """Unflushed seconds on the current page, including the untaken tick."""
    return advance(state, now).elapsed


def start(state: TimerState, page: int, now: float) -> Transition:
    """Start timing ``page``.

    Starting the page that is already running changes nothing; starting a
    different page while running switches to it.
    """
    check_page(page)
    if state.is_running:
        if state.current_page == page:
            return Transition(state)
        return switch_page(state, page, now)

    flushed = drain(state).flushed
    return Transition(TimerState(TimerStatus.RUNNING, page, 0.0, now), flushed)


def tick(
    state: TimerState, now: float, auto_flush_seconds: Optional[float] = AUTO_FLUSH_SECONDS
) -> Transition:
    """Advance a running timer, flushing once ``auto_flush_seconds`` accumulate."""
    if not state.is_running:
        return Transition(state)

    state = advance(state, now)
    if auto_flush_seconds and state.elapsed >= auto_flush_seconds:
        return drain(state)
    return Transition(state)


def pause(state: TimerState, now: float) -> Transition:
    """Flush and pause a running timer. No-op unless running."""
    if not state.is_running:
        return Transition(state)

    drained = drain(advance(state, now))
    return Transition(replace(drained.state, status=TimerStatus.PAUSED), drained.flushed)


def resume(state: TimerState, now: float) -> Transition:
    """Resume a paused timer. No-op unless paused."""
    if state.status is not TimerStatus.PAUSED:
        return Transition(state)
    return Transition(replace(state, status=TimerStatus.RUNNING, last_tick_at=now))


def switch_page(state: TimerState, new_page: int, now: float) -> Transition:
    """Flush the current page and move to ``new_page``, keeping the status."""
    check_page(new_page)
    drained = drain(advance(state, now))

    if state.is_running:
        return Transition(TimerState(TimerStatus.RUNNING, new_page, 0.0, now), drained.flushed)
    return Transition(replace(drained.state, current_page=new_page), drained.flushed)


def flush_and_stop(state: TimerState, now: float) -> Transition:
    """Flush and return to idle. Repeated calls flush nothing."""
    drained = drain(advance(state, now))
    return Transition(
        replace(drained.state, status=TimerStatus.IDLE, last_tick_at=None),
        drained.flushed,
    )
