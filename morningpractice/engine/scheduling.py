"""Single-threaded callback scheduling.

Everything that changes session state runs on one logical thread. A
:class:`Scheduler` is that thread's clock: it runs callbacks after a delay
and accepts callbacks posted from worker threads (speech completion), which
it runs on the owning thread.

Implementations:
- :class:`ManualScheduler`: virtual clock advanced explicitly (tests, selftest)
- :class:`AsyncioScheduler`: an asyncio event loop (headless CLI)
- ``morningpractice.ui.qt_scheduler.QtScheduler``: the Qt event loop (GUI)
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """Handle returned by :meth:`Scheduler.call_later`."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call repeatedly."""


class Scheduler(ABC):
    """Clock plus deferred-callback queue owned by one thread."""

    @abstractmethod
    def time(self) -> float:
        """Monotonic time in seconds."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* on the owning thread after *delay* seconds."""

    @abstractmethod
    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        """Run *callback* on the owning thread as soon as possible.

        May be called from any thread.
        """


class _ManualHandle(TimerHandle):
    __slots__ = ("when", "callback", "cancelled")

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by :meth:`advance`.

    Time only moves when the owner calls :meth:`advance`. Callbacks that
    become due run in deadline order (FIFO for equal deadlines), including
    callbacks scheduled by other callbacks during the same advance.

    Example:
        scheduler = ManualScheduler()
        scheduler.call_later(1.0, lambda: print("tick"))
        scheduler.advance(1.0)  # prints "tick"
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._heap: list[tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()
        self._posted: deque[Callable[[], None]] = deque()
        self._posted_lock = threading.Lock()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(self._now + max(0.0, float(delay)), callback)
        heapq.heappush(self._heap, (handle.when, next(self._seq), handle))
        return handle

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        with self._posted_lock:
            self._posted.append(callback)

    def run_pending(self) -> int:
        """Run callbacks posted via :meth:`call_soon_threadsafe`.

        Returns:
            Number of callbacks executed
        """
        count = 0
        while True:
            with self._posted_lock:
                if not self._posted:
                    return count
                callback = self._posted.popleft()
            callback()
            count += 1

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running everything that becomes due."""
        if seconds < 0:
            raise ValueError(f"Cannot advance by negative time: {seconds}")
        target = self._now + float(seconds)
        self.run_pending()
        while self._heap and self._heap[0][0] <= target:
            when, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = when
            handle.callback()
            self.run_pending()
        self._now = target

    def pending_count(self) -> int:
        """Number of live (not cancelled) timed callbacks."""
        return sum(1 for _, _, h in self._heap if not h.cancelled)


class _AsyncioHandle(TimerHandle):
    __slots__ = ("_handle",)

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Args:
        loop: Event loop that owns session state (default: running loop)
        time_scale: Clock speed multiplier; 2.0 makes a "second" last 0.5s
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, time_scale: float = 1.0):
        if time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {time_scale}")
        self._loop = loop or asyncio.get_running_loop()
        self.time_scale = float(time_scale)

    def time(self) -> float:
        return self._loop.time() * self.time_scale

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioHandle(self._loop.call_later(max(0.0, delay) / self.time_scale, callback))

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        self._loop.call_soon_threadsafe(callback)
