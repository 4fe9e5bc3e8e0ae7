"""Scheduler backed by the Qt event loop."""

from __future__ import annotations

import time
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..engine.scheduling import Scheduler, TimerHandle


class _Poster(QObject):
    """Receives callbacks emitted from worker threads on its own thread."""

    posted = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.posted.connect(self._run)

    def _run(self, callback) -> None:
        callback()


class _QtHandle(TimerHandle):
    def __init__(self, timer: QTimer, owner: "QtScheduler"):
        self._timer: Optional[QTimer] = timer
        self._owner = owner

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._owner._release(self._timer)
        self._timer = None


class QtScheduler(Scheduler):
    """
    Runs callbacks on the thread that created it (the GUI thread).

    ``call_soon_threadsafe`` emits a signal; when the emitting thread is not
    the receiver's, Qt queues the call onto the GUI thread.
    """

    def __init__(self, parent: Optional[QObject] = None):
        self._poster = _Poster(parent)
        self._timers: set[QTimer] = set()

    def time(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = QTimer(self._poster)
        timer.setSingleShot(True)
        handle = _QtHandle(timer, self)

        def _fire() -> None:
            self._release(timer)
            callback()

        timer.timeout.connect(_fire)
        self._timers.add(timer)
        timer.start(max(0, int(round(delay * 1000))))
        return handle

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        self._poster.posted.emit(callback)

    def _release(self, timer: QTimer) -> None:
        if timer in self._timers:
            self._timers.discard(timer)
            timer.deleteLater()
