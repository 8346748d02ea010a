"""Test fakes for pagetime tests."""

from tests.fakes.clock import FakeClock
from tests.fakes.stores import BlockingStore, FlakyStore, MemoryStore, UnreadableStore

__all__ = ["FakeClock", "BlockingStore", "FlakyStore", "MemoryStore", "UnreadableStore"]
