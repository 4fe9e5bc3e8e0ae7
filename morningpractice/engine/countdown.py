"""Cancellable one-second countdown.

A :class:`CountdownTimer` owns at most one running countdown. Starting a new
one cancels the previous one, and every scheduled step captures the
generation it was started under so a superseded countdown can never deliver
another tick or expiry.

Tick sequence for ``start(3, ...)``::

    t=1s  on_tick(2)
    t=2s  on_tick(1)
    t=3s  on_tick(0) then on_expire()
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class CountdownTimer:
    """
    Second-granularity countdown driven by a :class:`Scheduler`.

    Deadlines are anchored to the start time (``start + n * interval``),
    so late callbacks do not push later ticks back.

    Args:
        scheduler: Clock that delivers the steps
        interval_s: Length of one tick (1.0 in production)
    """

    def __init__(self, scheduler: Scheduler, interval_s: float = 1.0):
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self.scheduler = scheduler
        self.interval_s = float(interval_s)

        self._generation = 0
        self._handle: Optional[TimerHandle] = None
        self._running = False
        self._remaining = 0
        self._duration = 0
        self._started_at = 0.0
        self._on_tick: Optional[Callable[[int], None]] = None
        self._on_expire: Optional[Callable[[], None]] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def generation(self) -> int:
        return self._generation

    def start(
        self,
        duration_s: int,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
    ) -> None:
        """Start counting down from *duration_s*, cancelling any prior countdown."""
        if duration_s < 0:
            raise ValueError(f"duration_s must be non-negative, got {duration_s}")
        self.cancel()

        self._duration = int(duration_s)
        self._remaining = self._duration
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._started_at = self.scheduler.time()
        self._running = True
        generation = self._generation

        logger.debug("[timer] Started %ds (gen=%d)", self._duration, generation)
        if self._duration == 0:
            self._handle = self.scheduler.call_later(0.0, lambda: self._expire(generation))
        else:
            self._schedule_next(generation)

    def cancel(self) -> None:
        """Stop delivery of further ticks and expiry. No-op when idle."""
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._running:
            logger.debug("[timer] Cancelled with %ds remaining", self._remaining)
        self._running = False

    def _schedule_next(self, generation: int) -> None:
        elapsed_ticks = self._duration - self._remaining
        deadline = self._started_at + (elapsed_ticks + 1) * self.interval_s
        delay = max(0.0, deadline - self.scheduler.time())
        self._handle = self.scheduler.call_later(delay, lambda: self._step(generation))

    def _step(self, generation: int) -> None:
        if generation != self._generation or not self._running:
            logger.debug("[timer] Dropped stale step (gen=%d, current=%d)", generation, self._generation)
            return

        self._handle = None
        self._remaining -= 1
        logger.debug("[timer.trace] tick remaining=%d", self._remaining)
        if self._on_tick is not None:
            self._on_tick(self._remaining)

        # The tick handler may have cancelled or restarted the countdown.
        if generation != self._generation:
            return

        if self._remaining <= 0:
            self._expire(generation)
        else:
            self._schedule_next(generation)

    def _expire(self, generation: int) -> None:
        if generation != self._generation or not self._running:
            return
        self._handle = None
        self._running = False
        self._remaining = 0
        logger.debug("[timer] Expired (gen=%d)", generation)
        if self._on_expire is not None:
            self._on_expire()
