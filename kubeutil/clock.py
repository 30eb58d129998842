"""Injectable clocks and timers, with a real implementation.

Durations may be given as timedelta or as a number of seconds. Channels are
queues holding at most one pending time.
"""

from __future__ import annotations

import queue
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Union

Duration = Union[timedelta, float, int]


def _to_seconds(d: Duration) -> float:
    if isinstance(d, timedelta):
        return d.total_seconds()
    return float(d)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PassiveClock(ABC):
    """A clock that can read the current time but not schedule activity."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time."""

    @abstractmethod
    def since(self, ts: datetime) -> timedelta:
        """Return the time elapsed since ts."""


class Timer(ABC):
    """A one-shot timer delivering the firing time on a queue."""

    @abstractmethod
    def c(self) -> queue.Queue:
        """Return the queue the firing time is delivered on."""

    @abstractmethod
    def stop(self) -> bool:
        """Stop the timer; return True if it had not yet fired or been stopped."""

    @abstractmethod
    def reset(self, d: Duration) -> bool:
        """Restart the timer to fire after d; return True if it was active."""


class Clock(PassiveClock):
    """A clock that can also schedule activity in the future."""

    @abstractmethod
    def after(self, d: Duration) -> queue.Queue:
        """Return a queue that receives the time once d has elapsed."""

    @abstractmethod
    def new_timer(self, d: Duration) -> Timer:
        """Return a timer that fires after d."""

    @abstractmethod
    def sleep(self, d: Duration) -> None:
        """Block for d."""

    @abstractmethod
    def tick(self, d: Duration) -> queue.Queue | None:
        """Return a queue receiving times every d, or None if d is not positive."""


class RealTimer(Timer):
    """A timer backed by a background thread."""

    def __init__(self, d: Duration) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._generation = 0
        self._active = False
        self._thread: threading.Timer | None = None
        with self._lock:
            self._arm(d)

    def _arm(self, d: Duration) -> None:
        self._generation += 1
        self._active = True
        thread = threading.Timer(max(0.0, _to_seconds(d)), self._fire, args=(self._generation,))
        thread.daemon = True
        self._thread = thread
        thread.start()

    def _disarm(self) -> bool:
        was_active = self._active
        self._active = False
        self._generation += 1
        if self._thread is not None:
            self._thread.cancel()
            self._thread = None
        return was_active

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self._active:
                return
            self._active = False
            try:
                self._queue.put_nowait(_now())
            except queue.Full:
                pass

    def c(self) -> queue.Queue:
        return self._queue

    def stop(self) -> bool:
        with self._lock:
            return self._disarm()

    def reset(self, d: Duration) -> bool:
        with self._lock:
            was_active = self._disarm()
            self._arm(d)
            return was_active


def _run_ticker(target: queue.Queue, interval: float) -> None:
    next_at = time.monotonic() + interval
    while True:
        delay = next_at - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        try:
            target.put_nowait(_now())
        except queue.Full:
            pass
        next_at += interval
        current = time.monotonic()
        if next_at <= current:
            missed = int((current - next_at) // interval) + 1
            next_at += missed * interval


class RealClock(Clock):
    """A clock that reads and waits on the system time."""

    def now(self) -> datetime:
        return _now()

    def since(self, ts: datetime) -> timedelta:
        if ts.tzinfo is None:
            return datetime.now() - ts
        return datetime.now(ts.tzinfo) - ts

    def after(self, d: Duration) -> queue.Queue:
        return RealTimer(d).c()

    def new_timer(self, d: Duration) -> Timer:
        return RealTimer(d)

    def tick(self, d: Duration) -> queue.Queue | None:
        interval = _to_seconds(d)
        if interval <= 0:
            return None
        target: queue.Queue = queue.Queue(maxsize=1)
        threading.Thread(target=_run_ticker, args=(target, interval), daemon=True).start()
        return target

    def sleep(self, d: Duration) -> None:
        time.sleep(max(0.0, _to_seconds(d)))