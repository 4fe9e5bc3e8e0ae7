"""Unit tests for the transition chime (pygame-based)."""

from unittest.mock import MagicMock, patch

from morningpractice.config import PracticeConfig
from morningpractice.engine.chime import Chime


def _mixer(mock_mixer):
    mock_mixer.pre_init = MagicMock()
    mock_mixer.init = MagicMock()
    mock_mixer.get_init.return_value = (44100, -16, 2)
    return mock_mixer


@patch("pygame.mixer")
def test_chime_init_success(mock_mixer):
    _mixer(mock_mixer)
    c = Chime()
    assert c.init_ok is True
    assert c.available is True


@patch("pygame.mixer")
def test_chime_init_failure_is_silent(mock_mixer):
    _mixer(mock_mixer)
    mock_mixer.init = MagicMock(side_effect=RuntimeError("no audio device"))
    c = Chime()
    assert c.available is False
    assert c.ring() is False
    mock_mixer.Sound.assert_not_called()


@patch("pygame.mixer")
def test_ring_builds_sound_once(mock_mixer):
    _mixer(mock_mixer)
    c = Chime(PracticeConfig(chime_duration_s=0.1))
    assert c.ring() is True
    assert c.ring() is True
    assert mock_mixer.Sound.call_count == 1
    assert mock_mixer.Sound.return_value.play.call_count == 2


@patch("pygame.mixer")
def test_muted_ring_is_noop(mock_mixer):
    _mixer(mock_mixer)
    c = Chime()
    c.muted = True
    assert c.ring() is False
    mock_mixer.Sound.assert_not_called()


@patch("pygame.mixer")
def test_playback_error_does_not_raise(mock_mixer):
    _mixer(mock_mixer)
    mock_mixer.Sound.side_effect = RuntimeError("bad buffer")
    c = Chime()
    assert c.ring() is False


@patch("pygame.mixer")
def test_close_disables_ring(mock_mixer):
    _mixer(mock_mixer)
    c = Chime()
    c.close()
    mock_mixer.quit.assert_called_once()
    assert c.ring() is False
    c.close()
    mock_mixer.quit.assert_called_once()
