"""
Narrator - spoken prompts with an at-most-one-utterance rule.

``speak`` cancels whatever is being said before starting the new text and
reports whether a completion callback will follow. It returns False (and
never calls back) when muted, when no speech backend is available, or when
the backend refuses the utterance. Callers that chain work onto completion
run that work immediately on False, which keeps a session moving when
narration is impossible.
"""

from __future__ import annotations

import locale
import logging
import os
from typing import Callable, Optional, Sequence

from ..config import PracticeConfig
from .scheduling import Scheduler
from .speech import SpeechBackend, VoiceInfo

logger = logging.getLogger(__name__)


def detect_language_tag() -> str:
    """Best-effort BCP-47-ish tag for the user's locale, e.g. ``en-US``."""
    tag = None
    try:
        tag = locale.getlocale()[0]
    except ValueError:
        tag = None
    if not tag:
        for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
            value = os.environ.get(var)
            if value:
                tag = value
                break
    if not tag or tag in ("C", "POSIX"):
        return "en-US"
    return tag.split(".")[0].replace("_", "-")


def primary_language(tag: str) -> str:
    return tag.replace("_", "-").split("-")[0].lower()


def select_voice(
    voices: Sequence[VoiceInfo],
    language_tag: str,
    markers: Sequence[str] = ("female", "woman", "girl"),
) -> Optional[VoiceInfo]:
    """
    Pick the preferred voice for *language_tag*.

    A voice qualifies when one of its languages shares the primary subtag
    with *language_tag* and its name contains one of *markers*.

    Returns:
        The first qualifying voice, or None for the platform default
    """
    wanted = primary_language(language_tag)
    for voice in voices:
        name = voice.name.lower()
        if not any(marker in name for marker in markers):
            continue
        if any(primary_language(lang) == wanted for lang in voice.languages):
            return voice
    return None


class Narrator:
    """
    Speaks prompts through a :class:`SpeechBackend`.

    Completion is delivered on the scheduler's thread and only for the
    utterance that is still current; anything cancelled or superseded is
    discarded by a generation check.

    Args:
        backend: Speech engine, or None when speech is unavailable
        scheduler: Thread that receives completion callbacks
        config: Utterance rate/pitch/volume and voice markers
        language_tag: Locale used for voice matching (default: detected)
    """

    def __init__(
        self,
        backend: Optional[SpeechBackend],
        scheduler: Scheduler,
        config: Optional[PracticeConfig] = None,
        language_tag: Optional[str] = None,
    ):
        self.backend = backend
        self.scheduler = scheduler
        self.config = config or PracticeConfig()
        self.language_tag = language_tag or detect_language_tag()
        self.muted = False

        self._generation = 0
        self._speaking = False
        self._voice: Optional[VoiceInfo] = None
        self._voice_resolved = False
        self._warned_unavailable = False

    @property
    def available(self) -> bool:
        return self.backend is not None and self.backend.available

    @property
    def speaking(self) -> bool:
        return self._speaking

    @property
    def voice(self) -> Optional[VoiceInfo]:
        """Voice chosen for this locale (None = platform default)."""
        self._resolve_voice()
        return self._voice

    def _resolve_voice(self) -> None:
        if self._voice_resolved or not self.available:
            return
        voices = self.backend.voices()
        if not voices:
            # Voices may load lazily; try again on the next utterance.
            return
        self._voice = select_voice(voices, self.language_tag, self.config.voice_markers)
        self._voice_resolved = True
        if self._voice:
            logger.info("[narrator] Using voice %s for %s", self._voice.name, self.language_tag)
        else:
            logger.info("[narrator] No preferred voice for %s; using default", self.language_tag)

    def speak(self, text: str, on_complete: Optional[Callable[[], None]] = None) -> bool:
        """
        Cancel any current utterance and speak *text*.

        Args:
            text: Prompt to speak
            on_complete: Called on the scheduler thread when speech finishes

        Returns:
            True if *on_complete* will be delivered, False if nothing was spoken
        """
        if self.muted:
            logger.debug("[narrator] Muted; skipping %r", text[:40])
            return False
        if not self.available:
            if not self._warned_unavailable:
                self._warned_unavailable = True
                logger.warning("[narrator] Speech backend unavailable; narration disabled")
            return False

        self.cancel()
        self._resolve_voice()
        self._generation += 1
        generation = self._generation

        def _done() -> None:
            self.scheduler.call_soon_threadsafe(lambda: self._finished(generation, on_complete))

        try:
            self.backend.say(
                text,
                rate=self.config.speech_rate,
                pitch=self.config.speech_pitch,
                volume=self.config.speech_volume,
                voice_id=self._voice.id if self._voice else None,
                on_done=_done,
            )
        except Exception as exc:
            logger.warning("[narrator] Backend rejected utterance: %s", exc)
            return False

        self._speaking = True
        logger.debug("[narrator] Speaking (gen=%d): %r", generation, text[:60])
        return True

    def cancel(self) -> None:
        """Stop the current utterance; its completion will be discarded."""
        self._generation += 1
        if not self._speaking:
            return
        self._speaking = False
        logger.debug("[narrator] Cancelled utterance")
        if self.backend is not None:
            try:
                self.backend.stop()
            except Exception as exc:
                logger.debug("[narrator] backend.stop failed: %s", exc)

    def _finished(self, generation: int, on_complete: Optional[Callable[[], None]]) -> None:
        if generation != self._generation:
            logger.debug("[narrator] Dropped stale completion (gen=%d)", generation)
            return
        self._speaking = False
        if on_complete is not None:
            on_complete()

    def shutdown(self) -> None:
        self.cancel()
        if self.backend is not None:
            self.backend.shutdown()
