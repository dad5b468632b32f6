"""
Clock source for the pet session.

Timers are explicit handles rather than entries in a global registry. The front end
calls `Scheduler.run_pending()` once per frame and due callbacks run there, one at a
time and to completion, so nothing in the pet ever mutates concurrently.
"""

import heapq
import itertools
import time


def _monotonic_ms():
    return int(time.monotonic() * 1000)


def _epoch_ms():
    return int(time.time() * 1000)


class Timer:
    """Handle for a scheduled callback. Cancelling is idempotent.

    Usable as a context manager: leaving the block cancels the timer, whichever
    way the block is left.
    """

    def __init__(self, scheduler, due, callback, interval=None):
        self._scheduler = scheduler
        self.due = due
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    @property
    def active(self):
        return not self.cancelled

    def remaining(self):
        """Milliseconds until the next firing (0 when due or cancelled)."""
        if self.cancelled:
            return 0
        return max(0, self.due - self._scheduler.ticks())

    def cancel(self):
        self.cancelled = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False

    def __repr__(self):
        kind = "every" if self.interval else "once"
        return f"<Timer {kind} due={self.due} cancelled={self.cancelled}>"


class Scheduler:
    def __init__(self, ticks=None, wall_clock=None):
        # ticks: monotonic milliseconds (pygame.time.get_ticks in the game loop)
        # wall_clock: epoch milliseconds, used for lastUpdated stamps
        self._ticks = ticks or _monotonic_ms
        self._wall_clock = wall_clock or _epoch_ms
        self._queue = []
        self._seq = itertools.count()

    def ticks(self):
        """Monotonic milliseconds; timer due times are on this clock."""
        return int(self._ticks())

    def now(self):
        """Current wall-clock time in epoch milliseconds."""
        return int(self._wall_clock())

    def call_later(self, delay_ms, callback):
        """Run `callback` once, `delay_ms` from now."""
        if delay_ms < 0:
            raise ValueError(f"delay must be >= 0, got {delay_ms}")
        return self._push(Timer(self, self.ticks() + delay_ms, callback))

    def call_every(self, interval_ms, callback):
        """Run `callback` every `interval_ms` until the returned handle is cancelled."""
        if interval_ms <= 0:
            raise ValueError(f"interval must be > 0, got {interval_ms}")
        return self._push(Timer(self, self.ticks() + interval_ms, callback, interval=interval_ms))

    def _push(self, timer):
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    def pending(self):
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def run_pending(self):
        """Fire every timer that is due. Returns the number of callbacks run.

        A repeating timer that fell behind fires once per missed interval, in order.
        A timer cancelled by an earlier callback in the same pass does not fire.
        """
        now = self.ticks()
        fired = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            if timer.interval:
                timer.due += timer.interval
                self._push(timer)
            else:
                timer.cancelled = True
            timer.callback()
            fired += 1
        return fired

    def cancel_all(self):
        for _, _, timer in self._queue:
            timer.cancel()
        self._queue.clear()
