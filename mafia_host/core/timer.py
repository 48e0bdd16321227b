"""
Countdown timer and the scheduler it runs on.

The engine never sleeps: delayed work (timer ticks, the pause before Game
Over) is handed to a scheduler, and every callback it fires is treated like
any other inbound command, i.e. it runs under the server's lock.
"""

import math
import threading
import time
from typing import Callable, Optional


class ScheduledCall:
    """Handle for a callback scheduled with ``Scheduler.call_later``."""

    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler:
    """Source of time and of delayed callbacks."""

    def now(self) -> float:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError


class _ThreadCall(ScheduledCall):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadScheduler(Scheduler):
    """Runs callbacks on ``threading.Timer`` threads, serialized by ``lock``."""

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return _ThreadCall(timer)

    def _run(self, callback: Callable[[], None]) -> None:
        with self.lock:
            callback()


# Ticks can land a hair before the deadline
_EPSILON = 0.01


class CountdownTimer:
    """
    Single cancelable countdown.

    ``start`` replaces whatever timer was running; ``on_tick`` receives the
    whole seconds left once per interval and ``on_expire`` fires exactly once
    when the countdown reaches zero.
    """

    def __init__(self, scheduler: Scheduler, on_tick: Callable[[int], None],
                 interval: float = 1.0):
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.interval = interval
        self.end_time: Optional[float] = None
        self._on_expire: Optional[Callable[[], None]] = None
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0

    @property
    def is_active(self) -> bool:
        return self.end_time is not None

    @property
    def remaining(self) -> float:
        if self.end_time is None:
            return 0.0
        return max(0.0, self.end_time - self.scheduler.now())

    def start(self, duration: int, on_expire: Optional[Callable[[], None]] = None) -> None:
        self.cancel()
        self.end_time = self.scheduler.now() + duration
        self._on_expire = on_expire
        self._schedule_next()

    def extend(self, seconds: int) -> None:
        """Push the deadline back without restarting the countdown."""
        if self.end_time is None:
            return
        self.end_time += seconds

    def cancel(self) -> None:
        """Stop the countdown. Safe to call when nothing is running."""
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self.end_time = None
        self._on_expire = None

    def _schedule_next(self) -> None:
        generation = self._generation
        delay = min(self.interval, max(self.remaining, 0.0)) or self.interval
        self._pending = self.scheduler.call_later(delay, lambda: self._tick(generation))

    def _tick(self, generation: int) -> None:
        if generation != self._generation or self.end_time is None:
            return  # Cancelled or replaced while this tick was queued

        remaining = self.end_time - self.scheduler.now()
        if remaining <= _EPSILON:
            on_expire = self._on_expire
            self._pending = None
            self.cancel()
            self.on_tick(0)
            if on_expire is not None:
                on_expire()
            return

        self.on_tick(int(math.ceil(remaining - _EPSILON)))
        self._schedule_next()
