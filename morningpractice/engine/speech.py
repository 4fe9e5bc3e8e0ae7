"""Speech synthesis backends.

:class:`Pyttsx3Backend` keeps the pyttsx3 engine on a single worker thread
(several pyttsx3 drivers must be used from the thread that created them)
and feeds it utterances through a queue. Completion callbacks run on the
worker (or on the thread calling ``stop()`` for dropped utterances);
callers marshal them back to their own thread.
"""

from __future__ import annotations

import logging
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import pyttsx3

logger = logging.getLogger(__name__)

_INIT_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class VoiceInfo:
    """Voice reported by a speech backend.

    Attributes:
        id: Backend identifier passed back when selecting the voice
        name: Human-readable voice name
        languages: Language tags such as ``en-US`` (may be empty)
        gender: Backend-reported gender, if any
    """
    id: str
    name: str
    languages: tuple[str, ...] = ()
    gender: Optional[str] = None


def _decode_language(raw) -> str:
    # espeak reports languages as bytes prefixed with a priority byte, e.g. b"\x05en-gb"
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    return str(raw).strip().lstrip("\x00\x01\x02\x03\x04\x05\x06\x07\x08\x09").strip()


def voice_from_pyttsx3(voice) -> VoiceInfo:
    languages = tuple(
        lang for lang in (_decode_language(x) for x in (getattr(voice, "languages", None) or [])) if lang
    )
    gender = getattr(voice, "gender", None)
    return VoiceInfo(
        id=str(getattr(voice, "id", "") or ""),
        name=str(getattr(voice, "name", "") or ""),
        languages=languages,
        gender=str(gender).lower() if gender else None,
    )


class SpeechBackend(ABC):
    """Text-to-speech engine contract used by the narrator."""

    @property
    @abstractmethod
    def available(self) -> bool:
        """False when the engine could not initialize or has shut down."""

    @abstractmethod
    def voices(self) -> list[VoiceInfo]:
        """Currently known voices; may be empty until the engine has loaded them."""

    @abstractmethod
    def say(
        self,
        text: str,
        *,
        rate: float,
        pitch: float,
        volume: float,
        voice_id: Optional[str],
        on_done: Callable[[], None],
    ) -> None:
        """Queue *text*; *on_done* fires once it finished or failed (any thread)."""

    @abstractmethod
    def stop(self) -> None:
        """Interrupt the current utterance and drop queued ones."""

    def shutdown(self) -> None:
        """Release engine resources."""
        self.stop()


@dataclass
class _Utterance:
    text: str
    rate: float
    pitch: float
    volume: float
    voice_id: Optional[str]
    on_done: Callable[[], None]
    stop_serial: int = 0


class Pyttsx3Backend(SpeechBackend):
    """
    pyttsx3 engine running on a dedicated daemon thread.

    ``stop()`` never touches the engine from the caller's thread. It bumps a
    stop serial; the worker checks that serial from pyttsx3's
    ``started-utterance``/``started-word`` callbacks (which run inside
    ``runAndWait`` on the worker) and calls ``engine.stop()`` there.

    Args:
        driver_name: Optional pyttsx3 driver ("sapi5", "nsss", "espeak")
        init_timeout_s: How long to wait for the engine to come up
    """

    def __init__(self, driver_name: Optional[str] = None, init_timeout_s: float = _INIT_TIMEOUT_S):
        self.driver_name = driver_name
        self._queue: "queue.Queue[Optional[_Utterance]]" = queue.Queue()
        self._ready = threading.Event()
        self._available = False
        self._voices: list[VoiceInfo] = []
        self._normal_rate = 200
        self._pitch_warned = False
        self._stop_lock = threading.Lock()
        self._stop_serial = 0
        self._current: Optional[_Utterance] = None
        self._thread = threading.Thread(target=self._run, name="speech-worker", daemon=True)
        self._thread.start()
        if not self._ready.wait(init_timeout_s):
            logger.warning("[speech] Engine did not initialize within %.1fs; narration disabled", init_timeout_s)

    @property
    def available(self) -> bool:
        return self._available

    def voices(self) -> list[VoiceInfo]:
        return list(self._voices)

    def say(self, text, *, rate, pitch, volume, voice_id, on_done) -> None:
        if not self._available:
            raise RuntimeError("speech engine unavailable")
        with self._stop_lock:
            serial = self._stop_serial
        self._queue.put(_Utterance(text, rate, pitch, volume, voice_id, on_done, serial))

    def stop(self) -> None:
        with self._stop_lock:
            self._stop_serial += 1
        dropped = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is None:
                # keep the shutdown sentinel
                self._queue.put(None)
                break
            dropped.append(item)
        if dropped:
            logger.debug("[speech] Dropped %d queued utterance(s)", len(dropped))
        for item in dropped:
            self._notify_done(item)

    def shutdown(self) -> None:
        self.stop()
        self._available = False
        self._queue.put(None)
        self._thread.join(timeout=2.0)

    def _interrupted(self, item: _Utterance) -> bool:
        with self._stop_lock:
            return item.stop_serial != self._stop_serial

    # -------- worker thread -------------------------------------------------
    def _run(self) -> None:
        try:
            engine = pyttsx3.init(self.driver_name) if self.driver_name else pyttsx3.init()
            self._normal_rate = int(engine.getProperty("rate") or 200)
            self._voices = [voice_from_pyttsx3(v) for v in (engine.getProperty("voices") or [])]
            # pyttsx3 passes callback arguments by keyword
            engine.connect("started-utterance", lambda **_: self._check_interrupt(engine))
            engine.connect("started-word", lambda **_: self._check_interrupt(engine))
            self._available = True
            logger.info("[speech] pyttsx3 ready (%d voices, rate=%d)", len(self._voices), self._normal_rate)
        except Exception as exc:
            logger.warning("[speech] pyttsx3 init failed, narration disabled: %s", exc)
            self._ready.set()
            return
        self._ready.set()

        while True:
            item = self._queue.get()
            if item is None:
                break
            if self._interrupted(item):
                self._notify_done(item)
                continue
            self._speak(engine, item)

        try:
            engine.stop()
        except Exception:
            logger.debug("[speech] engine.stop during shutdown failed", exc_info=True)

    def _check_interrupt(self, engine) -> None:
        item = self._current
        if item is None or not self._interrupted(item):
            return
        try:
            engine.stop()
        except Exception as exc:
            logger.warning("[speech] Could not interrupt utterance: %s", exc)

    def _speak(self, engine, item: _Utterance) -> None:
        self._current = item
        try:
            engine.setProperty("rate", int(self._normal_rate * item.rate))
            engine.setProperty("volume", float(item.volume))
            if item.voice_id:
                engine.setProperty("voice", item.voice_id)
            if item.pitch != 1.0 and not self._pitch_warned:
                self._pitch_warned = True
                logger.info("[speech] pyttsx3 has no pitch control; ignoring pitch=%.2f", item.pitch)
            engine.say(item.text)
            engine.runAndWait()
        except Exception as exc:
            logger.warning("[speech] Utterance failed: %s", exc)
        finally:
            self._current = None
            self._notify_done(item)

    @staticmethod
    def _notify_done(item: _Utterance) -> None:
        try:
            item.on_done()
        except Exception as exc:
            logger.error("[speech] Completion callback error: %s", exc, exc_info=True)
