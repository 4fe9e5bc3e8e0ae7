from __future__ import annotations

import numpy as np


_CHIME_CACHE: dict[tuple[float, float, float, float, int, int], np.ndarray] = {}


def chime_envelope(n_samples: int, attack_samples: int, peak: float) -> np.ndarray:
    """Linear 0 -> peak over *attack_samples*, then peak -> 0 at the last sample."""
    env = np.zeros(n_samples, dtype=np.float64)
    if n_samples <= 0:
        return env
    attack_samples = int(max(0, min(attack_samples, n_samples - 1)))
    if attack_samples > 0:
        env[:attack_samples] = np.linspace(0.0, peak, attack_samples, endpoint=False)
    env[attack_samples:] = np.linspace(peak, 0.0, n_samples - attack_samples)
    return env


def generate_chime_int16(
    *,
    frequency_hz: float = 432.0,
    duration_s: float = 2.0,
    attack_s: float = 0.1,
    peak: float = 0.3,
    sample_rate: int = 44100,
    channels: int = 2,
) -> np.ndarray:
    """Generate an int16 sine chime with an attack/decay envelope.

    The tone ramps linearly from silence to *peak* over *attack_s* and back
    to silence by *duration_s*, so it needs no explicit stop.

    Returns:
        numpy int16 array shaped (n_samples, channels)
    """

    sample_rate = int(max(8000, sample_rate))
    channels = int(max(1, channels))
    duration_s = float(max(0.01, duration_s))
    attack_s = float(max(0.0, min(attack_s, duration_s)))
    peak = float(max(0.0, min(1.0, peak)))

    cache_key = (float(frequency_hz), duration_s, attack_s, peak, sample_rate, channels)
    cached = _CHIME_CACHE.get(cache_key)
    if cached is not None:
        return cached

    n = int(round(duration_s * sample_rate))
    t = np.arange(n, dtype=np.float64) / float(sample_rate)
    wave = np.sin(2.0 * np.pi * float(frequency_hz) * t)
    sig = wave * chime_envelope(n, int(round(attack_s * sample_rate)), peak)

    frames = np.repeat(sig[:, None], channels, axis=1)
    pcm = np.clip(frames * 32767.0, -32768.0, 32767.0).astype(np.int16)
    pcm = np.ascontiguousarray(pcm)
    _CHIME_CACHE[cache_key] = pcm
    return pcm
