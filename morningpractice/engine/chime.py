"""Transition chime played through the pygame mixer."""

import os
import logging
from typing import Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from ..config import PracticeConfig  # noqa: E402
from .tones import generate_chime_int16  # noqa: E402

MIXER_FREQUENCY = 44100
MIXER_SIZE = -16
MIXER_CHANNELS = 2


class Chime:
    """
    - Synthesizes the chime once (numpy) and keeps it as a ``pygame.mixer.Sound``
    - ``ring()`` is a no-op while muted, after ``close()``, or when the mixer
      could not initialize; it never raises
    """

    def __init__(self, config: Optional[PracticeConfig] = None):
        self.config = config or PracticeConfig()
        self.muted = False
        self.init_ok = False
        self._sound = None
        self._logger = logging.getLogger(__name__)
        try:
            pygame.mixer.pre_init(MIXER_FREQUENCY, MIXER_SIZE, MIXER_CHANNELS, 512)
            pygame.mixer.init()
            self.init_ok = True
            self._logger.info("[chime] pygame mixer initialized")
        except Exception as e:
            self._logger.warning("[chime] audio init failed, chime disabled: %s", e)

    @property
    def available(self) -> bool:
        return self.init_ok

    def _build_sound(self):
        channels = MIXER_CHANNELS
        sample_rate = MIXER_FREQUENCY
        mixer_init = pygame.mixer.get_init()
        if mixer_init:
            sample_rate, _, channels = mixer_init
        pcm = generate_chime_int16(
            frequency_hz=self.config.chime_frequency_hz,
            duration_s=self.config.chime_duration_s,
            attack_s=self.config.chime_attack_s,
            peak=self.config.chime_peak,
            sample_rate=sample_rate,
            channels=channels,
        )
        return pygame.mixer.Sound(buffer=pcm.tobytes())

    def ring(self) -> bool:
        """Play the chime once. Returns True when playback started."""
        if self.muted or not self.init_ok:
            return False
        try:
            if self._sound is None:
                self._sound = self._build_sound()
            self._sound.play()
            self._logger.debug("[chime] ring")
            return True
        except Exception as e:
            self._logger.warning("[chime] playback failed: %s", e)
            return False

    def close(self):
        """Release the mixer; later rings are no-ops."""
        if not self.init_ok:
            return
        self.init_ok = False
        self._sound = None
        try:
            pygame.mixer.quit()
        except Exception as e:
            self._logger.debug("[chime] mixer quit failed: %s", e)
