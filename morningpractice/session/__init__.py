"""
Practice session package.

Core Components:
- SessionState / Stage: immutable session snapshot
- transitions.reduce: pure (state, event) -> (state, effects) function
- PracticeSession: executes effects with the timer, narrator and chime
- SessionEventEmitter: change notifications for UI and CLI
- build_view: read-only view model for presentation
"""

from .state import Stage, SessionState
from .transitions import reduce, Transition
from .events import SessionEventType, SessionEvent, SessionEventEmitter
from .runner import PracticeSession, build_session
from .view import PracticeView, build_view, format_time

__all__ = [
    'Stage',
    'SessionState',
    'reduce',
    'Transition',
    'SessionEventType',
    'SessionEvent',
    'SessionEventEmitter',
    'PracticeSession',
    'build_session',
    'PracticeView',
    'build_view',
    'format_time',
]
