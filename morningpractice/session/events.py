"""Notifications published by :class:`PracticeSession`.

The window, the headless runner and tests observe a session only through
these events; none of them reach into the session's internals.

Example:
    bus = SessionEventEmitter()
    bus.subscribe(SessionEventType.STAGE_CHANGED, lambda evt: print(evt.get("stage")))
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class SessionEventType(Enum):
    STATE_CHANGED = auto()      # accepted transition; data: state
    STAGE_CHANGED = auto()      # data: stage, previous
    TICK = auto()               # data: remaining
    MUTE_CHANGED = auto()       # data: muted
    TRIGGER_IGNORED = auto()    # data: event, reason
    SESSION_RESET = auto()
    SESSION_COMPLETE = auto()


@dataclass
class SessionEvent:
    """One notification.

    Attributes:
        event_type: What happened
        data: Payload keys listed on :class:`SessionEventType`
        timestamp: Wall-clock time of creation
    """
    event_type: SessionEventType
    data: Optional[dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)

    def get(self, key: str, default: Any = None) -> Any:
        return (self.data or {}).get(key, default)

    def __str__(self) -> str:
        payload = ", ".join(f"{k}={v}" for k, v in (self.data or {}).items())
        name = self.event_type.name
        return f"SessionEvent({name}, {payload})" if payload else f"SessionEvent({name})"


Listener = Callable[[SessionEvent], None]


class SessionEventEmitter:
    """Synchronous publish/subscribe keyed by :class:`SessionEventType`.

    Listeners run in subscription order on the caller's thread. A listener
    that raises is logged and skipped; delivery to the rest continues.
    """

    def __init__(self):
        self._listeners: dict[SessionEventType, list[Listener]] = {}

    def subscribe(self, event_type: SessionEventType, callback: Listener) -> None:
        """Register *callback*; registering the same callback twice is a no-op."""
        bucket = self._listeners.setdefault(event_type, [])
        if callback in bucket:
            return
        bucket.append(callback)
        logger.debug("[events] +%s (%d listeners)", event_type.name, len(bucket))

    def unsubscribe(self, event_type: SessionEventType, callback: Listener) -> None:
        bucket = self._listeners.get(event_type, [])
        if callback in bucket:
            bucket.remove(callback)
            logger.debug("[events] -%s (%d listeners)", event_type.name, len(bucket))

    def emit(self, event: SessionEvent) -> None:
        if event.event_type is not SessionEventType.TICK:
            logger.debug("[events] %s", event)
        # copy: listeners may unsubscribe while being notified
        for callback in tuple(self._listeners.get(event.event_type, ())):
            try:
                callback(event)
            except Exception:
                logger.exception("[events] Listener failed on %s", event.event_type.name)

    def clear_all(self) -> None:
        self._listeners.clear()
