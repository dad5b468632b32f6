import os

# Headless pygame for the GameEngine tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from tamapet.scheduler import Scheduler

T0 = 1_700_000_000_000  # epoch ms used as "now" at the start of every test


class ManualClock:
    """Drives a Scheduler by hand: both clocks move only when advance() is called."""

    def __init__(self, epoch_ms=T0):
        self.ticks = 0
        self.epoch_ms = epoch_ms
        self.scheduler = Scheduler(ticks=lambda: self.ticks, wall_clock=lambda: self.epoch_ms)

    def advance(self, ms, step=None):
        """Move time forward by `ms`, firing due timers. With `step`, fire every `step` ms."""
        fired = 0
        remaining = ms
        while remaining > 0:
            delta = min(step or remaining, remaining)
            self.ticks += delta
            self.epoch_ms += delta
            remaining -= delta
            fired += self.scheduler.run_pending()
        return fired


class FakeStore:
    """In-memory key-value store with switchable failures."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.fail_reads = None
        self.fail_writes = None
        self.writes = 0

    def get(self, key):
        if self.fail_reads:
            raise self.fail_reads
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise self.fail_writes
        self.writes += 1
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)

    def close(self):
        pass


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return clock.scheduler


@pytest.fixture
def store():
    return FakeStore()
