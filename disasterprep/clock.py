from __future__ import annotations

import heapq
import itertools
import logging
import time
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Monotonic clock abstraction.

    Engine logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class TimerHandle:
    """Handle for one pending delayed callback."""

    __slots__ = ("_due_s", "_callback", "_cancelled", "_fired")

    def __init__(self, due_s: float, callback: Callable[[], None]) -> None:
        self._due_s = float(due_s)
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def due_s(self) -> float:
        return self._due_s

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        # Cancelling a fired or already-cancelled handle is a no-op.
        if self._fired:
            return
        self._cancelled = True

    def _fire(self) -> None:
        self._fired = True
        self._callback()


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class ClockScheduler:
    """One-shot delayed callbacks driven by an injected Clock.

    There are no threads: the host loop calls run_due() (once per frame in the
    UI shell, explicitly in tests) and due callbacks run synchronously, ordered
    by due time and then by the order they were armed.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, TimerHandle]] = []

    @property
    def clock(self) -> Clock:
        return self._clock

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        if delay_s < 0.0:
            delay_s = 0.0
        handle = TimerHandle(self._clock.now() + float(delay_s), callback)
        heapq.heappush(self._queue, (handle.due_s, next(self._seq), handle))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if h.active)

    def run_due(self) -> int:
        """Fire every callback that is due now. Returns how many fired."""

        now = self._clock.now()
        fired = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            handle._fire()
            fired += 1
        if fired:
            _logger.debug("fired %d timer callback(s) at t=%.3f", fired, now)
        return fired
