"""Tests for debounced ledger persistence.

Scenarios run inside ``asyncio.run`` so the persister schedules real
debounced writes on an event loop.
"""

import asyncio
import logging

import pytest

from pagetime.reading.ledger import ReadingLedger
from pagetime.reading.timer import SessionTimer
from tests.fakes import BlockingStore, FakeClock, FlakyStore, MemoryStore


def make_ledger(store, window=0.5, max_retries=5, retry_delay=0.01) -> ReadingLedger:
    ledger = ReadingLedger(
        "doc", store, debounce=window, max_retries=max_retries, retry_delay=retry_delay
    )
    ledger.hydrate({})
    return ledger


class TestDebounce:
    """Tests for collapsing bursts of merges."""

    def test_burst_of_merges_is_one_write(self):
        """Test five merges inside the window produce a single save."""
        store = MemoryStore()

        async def scenario():
            ledger = make_ledger(store, window=0.5)
            for page in range(1, 6):
                ledger.merge(page, 10.0)
                await asyncio.sleep(0.05)

            assert store.saves == []
            assert ledger.persister.pending

            await asyncio.sleep(0.8)
            return ledger

        ledger = asyncio.run(scenario())

        assert len(store.saves) == 1
        assert store.saves[0] == {1: 10.0, 2: 10.0, 3: 10.0, 4: 10.0, 5: 10.0}
        assert not ledger.persister.dirty

    def test_write_uses_latest_snapshot(self):
        """Test the write carries the map as of write time."""
        store = MemoryStore()

        async def scenario():
            ledger = make_ledger(store, window=0.1)
            ledger.merge(1, 1.0)
            ledger.merge(1, 2.0)
            await asyncio.sleep(0.3)

        asyncio.run(scenario())

        assert store.saves == [{1: 3.0}]


class TestInFlightCoalescing:
    """Tests for requests made while a write is running."""

    def test_requests_during_write_schedule_one_follow_up(self):
        """Test merges during a slow write lead to exactly one more save."""
        store = BlockingStore()

        async def scenario():
            ledger = make_ledger(store, window=0.01)
            ledger.merge(1, 5.0)
            assert await asyncio.to_thread(store.started.wait, 2)

            ledger.merge(2, 3.0)
            ledger.merge(3, 4.0)
            ledger.merge(2, 1.0)
            store.release.set()
            await asyncio.sleep(0.3)
            return ledger

        ledger = asyncio.run(scenario())

        assert len(store.saves) == 2
        assert store.saves[0] == {1: 5.0}
        assert store.saves[1] == {1: 5.0, 2: 4.0, 3: 4.0}
        assert not ledger.persister.dirty
        assert not ledger.persister.pending


class TestRetry:
    """Tests for retrying failed writes."""

    def test_retries_until_success(self):
        """Test a store that fails twice is eventually written."""
        store = FlakyStore(failures=2)

        async def scenario():
            ledger = make_ledger(store, window=0.01, retry_delay=0.01)
            ledger.merge(1, 5.0)
            await asyncio.sleep(0.5)
            return ledger

        ledger = asyncio.run(scenario())

        assert store.attempts == 3
        assert store.saves == [{1: 5.0}]
        assert ledger.persister.failures == 0
        assert not ledger.persister.dirty

    def test_gives_up_after_max_retries(self, caplog):
        """Test automatic retries stop and the ledger stays dirty."""
        store = FlakyStore(failures=-1)

        async def scenario():
            ledger = make_ledger(store, window=0.01, max_retries=2, retry_delay=0.01)
            ledger.merge(1, 5.0)
            await asyncio.sleep(0.5)
            return ledger

        with caplog.at_level(logging.WARNING, logger="pagetime.persist"):
            ledger = asyncio.run(scenario())

        assert store.attempts == 3
        assert ledger.persister.dirty
        assert not ledger.persister.pending
        assert ledger.page_seconds(1) == 5.0
        assert "Giving up automatic saves of doc" in caplog.text

    def test_next_change_retries_again(self):
        """Test a merge after giving up triggers a new attempt."""
        store = FlakyStore(failures=3)

        async def scenario():
            ledger = make_ledger(store, window=0.01, max_retries=2, retry_delay=0.01)
            ledger.merge(1, 5.0)
            await asyncio.sleep(0.3)
            assert store.attempts == 3
            ledger.merge(1, 1.0)
            await asyncio.sleep(0.3)
            return ledger

        ledger = asyncio.run(scenario())

        assert store.attempts == 4
        assert store.saves == [{1: 6.0}]
        assert not ledger.persister.dirty


class TestDrain:
    """Tests for draining outstanding writes."""

    def test_drain_writes_immediately(self):
        """Test drain does not wait for the debounce window."""
        store = MemoryStore()

        async def scenario():
            ledger = make_ledger(store, window=60.0)
            ledger.merge(1, 5.0)
            ok = await ledger.drain()
            return ledger, ok

        ledger, ok = asyncio.run(scenario())

        assert ok
        assert store.saves == [{1: 5.0}]
        assert not ledger.persister.pending

    def test_drain_when_clean(self):
        """Test draining a clean ledger writes nothing."""
        store = MemoryStore()

        async def scenario():
            return await make_ledger(store).drain()

        assert asyncio.run(scenario())
        assert store.saves == []

    def test_drain_waits_for_in_flight_write(self):
        """Test drain finishes the running write and then the rest."""
        store = BlockingStore()

        async def scenario():
            ledger = make_ledger(store, window=0.01)
            ledger.merge(1, 5.0)
            assert await asyncio.to_thread(store.started.wait, 2)
            ledger.merge(2, 5.0)
            asyncio.get_running_loop().call_later(0.05, store.release.set)
            return await ledger.drain()

        assert asyncio.run(scenario())
        assert store.saves == [{1: 5.0}, {1: 5.0, 2: 5.0}]

    def test_drain_reports_failure(self):
        """Test drain returns False when the store keeps failing."""
        store = FlakyStore(failures=-1)

        async def scenario():
            ledger = make_ledger(store, window=60.0)
            ledger.merge(1, 5.0)
            ok = await ledger.drain()
            return ledger, ok

        ledger, ok = asyncio.run(scenario())

        assert not ok
        assert ledger.persister.dirty

    def test_memory_only_drain(self, ledger):
        """Test a ledger without a store drains trivially."""
        assert asyncio.run(ledger.drain())

    def test_requests_during_drain_are_written(self):
        """Test a merge made while drain is writing is saved before drain returns."""
        store = BlockingStore()

        async def scenario():
            ledger = make_ledger(store, window=0.01)
            ledger.merge(1, 1.0)
            draining = asyncio.create_task(ledger.drain())
            assert await asyncio.to_thread(store.started.wait, 2)

            ledger.merge(1, 1.0)
            await asyncio.sleep(0.1)
            store.release.set()
            ok = await draining
            return ledger, ok

        ledger, ok = asyncio.run(scenario())

        assert ok
        assert store.max_active == 1
        assert store.saves == [{1: 1.0}, {1: 2.0}]
        assert store.data["doc"] == dict(ledger.snapshot())
        assert not ledger.persister.dirty


class TestWithoutEventLoop:
    """Tests for persistence when no event loop is running."""

    def test_requests_are_deferred(self):
        """Test merges only mark the ledger dirty until flushed."""
        store = MemoryStore()
        ledger = make_ledger(store)
        for page in range(1, 6):
            ledger.merge(page, 10.0)

        assert store.saves == []
        assert ledger.persister.dirty

        assert ledger.flush()
        assert store.saves == [{1: 10.0, 2: 10.0, 3: 10.0, 4: 10.0, 5: 10.0}]
        assert not ledger.persister.dirty

    def test_flush_when_clean(self):
        """Test flushing a clean ledger writes nothing."""
        store = MemoryStore()
        ledger = make_ledger(store)
        ledger.merge(1, 1.0)
        ledger.flush()
        ledger.flush()

        assert len(store.saves) == 1

    def test_page_turns_do_not_write(self):
        """Test a synchronous timer never blocks on the store while reading."""
        store = MemoryStore()
        ledger = make_ledger(store, window=1.0)
        clock = FakeClock()
        timer = SessionTimer(ledger, clock=clock)
        timer.start(1)
        for page in range(2, 7):
            clock.advance(0.1)
            timer.switch_page(page)

        assert store.saves == []
        assert ledger.flush()
        assert len(store.saves) == 1
        assert store.data["doc"] == pytest.approx({1: 0.1, 2: 0.1, 3: 0.1, 4: 0.1, 5: 0.1})

    def test_flush_failure(self):
        """Test a failed flush reports False and keeps the ledger dirty."""
        store = FlakyStore(failures=1)
        ledger = make_ledger(store)
        ledger.merge(1, 1.0)

        assert not ledger.flush()
        assert ledger.persister.dirty
        assert ledger.flush()
        assert store.saves == [{1: 1.0}]
