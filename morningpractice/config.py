"""Practice configuration.

All timing, narration and chime constants live in :class:`PracticeConfig`.
Values come from (lowest to highest priority): built-in defaults, a JSON
file, then explicit overrides from the command line or tests.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .platform_paths import get_default_config_path

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MORNINGPRACTICE_CONFIG"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be parsed or is invalid."""


@dataclass(frozen=True)
class PracticeConfig:
    """
    Session timing plus utterance and chime constants.

    Attributes:
        exercise_count: Number of exercises drawn for a session
        warm_up_seconds: Warm-up countdown length
        exercise_seconds: Per-exercise countdown length
        cool_down_seconds: Cool-down countdown length
        speech_rate: Multiplier applied to the speech backend's normal rate
        speech_pitch: Pitch multiplier (1.0 = voice default)
        speech_volume: Utterance volume 0..1
        chime_frequency_hz: Chime sine frequency
        chime_peak: Chime envelope peak amplitude 0..1
        chime_attack_s: Linear ramp from silence to peak
        chime_duration_s: Total chime length (attack + decay)
        voice_markers: Name fragments that identify the preferred voice
    """
    exercise_count: int = 10
    warm_up_seconds: int = 60
    exercise_seconds: int = 30
    cool_down_seconds: int = 60
    speech_rate: float = 0.9
    speech_pitch: float = 1.0
    speech_volume: float = 0.8
    chime_frequency_hz: float = 432.0
    chime_peak: float = 0.3
    chime_attack_s: float = 0.1
    chime_duration_s: float = 2.0
    voice_markers: tuple[str, ...] = ("female", "woman", "girl")

    def validate(self) -> tuple[bool, str]:
        """
        Validate configuration constraints.

        Returns:
            (is_valid, error_message)
        """
        if self.exercise_count <= 0:
            return False, f"exercise_count must be positive, got {self.exercise_count}"

        for name in ("warm_up_seconds", "exercise_seconds", "cool_down_seconds"):
            value = getattr(self, name)
            if value <= 0:
                return False, f"{name} must be positive, got {value}"

        if self.speech_rate <= 0:
            return False, f"speech_rate must be positive, got {self.speech_rate}"
        if self.speech_pitch <= 0:
            return False, f"speech_pitch must be positive, got {self.speech_pitch}"
        if not 0.0 <= self.speech_volume <= 1.0:
            return False, f"speech_volume must be within 0..1, got {self.speech_volume}"
        if not 0.0 <= self.chime_peak <= 1.0:
            return False, f"chime_peak must be within 0..1, got {self.chime_peak}"
        if self.chime_frequency_hz <= 0:
            return False, f"chime_frequency_hz must be positive, got {self.chime_frequency_hz}"
        if self.chime_duration_s <= 0:
            return False, f"chime_duration_s must be positive, got {self.chime_duration_s}"
        if not 0.0 <= self.chime_attack_s < self.chime_duration_s:
            return False, (
                f"chime_attack_s ({self.chime_attack_s}) must be non-negative and shorter "
                f"than chime_duration_s ({self.chime_duration_s})"
            )

        return True, ""

    def with_overrides(self, **overrides: Any) -> PracticeConfig:
        """Return a copy with non-None overrides applied and validated."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        updated = replace(self, **changes)
        ok, error = updated.validate()
        if not ok:
            raise ConfigError(error)
        return updated

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["voice_markers"] = list(self.voice_markers)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PracticeConfig:
        """Deserialize from dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("[config] Ignoring unknown keys: %s", ", ".join(unknown))

        values = {k: v for k, v in data.items() if k in known}
        if "voice_markers" in values:
            values["voice_markers"] = tuple(str(m).lower() for m in values["voice_markers"])

        try:
            config = cls(**values)
        except TypeError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc

        ok, error = config.validate()
        if not ok:
            raise ConfigError(error)
        return config


def load_config(path: Optional[str | Path] = None) -> PracticeConfig:
    """Load configuration from *path*, ``$MORNINGPRACTICE_CONFIG`` or the user dir.

    An explicit path or env path must exist. The per-user default file is
    optional; defaults are returned when it is missing.
    """
    explicit = path if path is not None else os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        target = Path(explicit)
        if not target.is_file():
            raise ConfigError(f"Config file not found: {target}")
    else:
        target = get_default_config_path()
        if not target.is_file():
            logger.debug("[config] No config file at %s; using defaults", target)
            return PracticeConfig()

    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read config {target}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config {target} must contain a JSON object")

    config = PracticeConfig.from_dict(data)
    logger.info("[config] Loaded %s", target)
    return config


def save_config(config: PracticeConfig, path: Optional[str | Path] = None) -> Path:
    """Write *config* as JSON and return the path written."""
    target = Path(path) if path is not None else get_default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    logger.debug("[config] Saved %s", target)
    return target
