"""Tests for chime synthesis."""

import numpy as np

from morningpractice.engine.tones import chime_envelope, generate_chime_int16


def test_envelope_shape():
    env = chime_envelope(100, 10, 0.5)
    assert env.shape == (100,)
    assert env[0] == 0.0
    assert env[10] == np.float64(0.5)
    assert env.max() == np.float64(0.5)
    assert env[-1] == 0.0
    assert np.all(np.diff(env[:10]) > 0)
    assert np.all(np.diff(env[10:]) < 0)


def test_envelope_empty():
    assert chime_envelope(0, 10, 0.3).size == 0


def test_chime_pcm_layout():
    pcm = generate_chime_int16(duration_s=0.5, sample_rate=8000, channels=2)
    assert pcm.dtype == np.int16
    assert pcm.shape == (4000, 2)
    assert pcm.flags["C_CONTIGUOUS"]
    assert np.array_equal(pcm[:, 0], pcm[:, 1])


def test_chime_peak_and_silence_at_edges():
    pcm = generate_chime_int16(duration_s=1.0, peak=0.3, sample_rate=8000, channels=1)
    assert np.abs(pcm).max() <= int(0.3 * 32767) + 1
    assert pcm[0, 0] == 0
    assert abs(int(pcm[-1, 0])) <= 1


def test_chime_is_cached():
    a = generate_chime_int16(duration_s=0.2, sample_rate=8000, channels=1)
    b = generate_chime_int16(duration_s=0.2, sample_rate=8000, channels=1)
    assert a is b
