"""Engine module for MorningPractice."""

from .scheduling import Scheduler, TimerHandle, ManualScheduler, AsyncioScheduler
from .countdown import CountdownTimer
from .shuffler import select, fisher_yates
from .speech import SpeechBackend, VoiceInfo
from .narrator import Narrator, select_voice, detect_language_tag

__all__ = [
    'Scheduler', 'TimerHandle', 'ManualScheduler', 'AsyncioScheduler',
    'CountdownTimer', 'select', 'fisher_yates',
    'SpeechBackend', 'VoiceInfo', 'Narrator', 'select_voice', 'detect_language_tag',
]
