"""Tests for the pyttsx3 backend (engine mocked)."""

import threading
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from morningpractice.engine.speech import Pyttsx3Backend, VoiceInfo, voice_from_pyttsx3


def fake_engine(voices=()):
    engine = MagicMock()
    props = {"rate": 200, "voices": list(voices)}
    engine.getProperty.side_effect = lambda name: props.get(name)
    return engine


def test_voice_from_pyttsx3_decodes_espeak_languages():
    raw = SimpleNamespace(id="gmw/en", name="English", languages=[b"\x05en-gb"], gender="Female")
    assert voice_from_pyttsx3(raw) == VoiceInfo(id="gmw/en", name="English", languages=("en-gb",), gender="female")


def test_voice_from_pyttsx3_missing_fields():
    info = voice_from_pyttsx3(SimpleNamespace(id="v1", name="Voice"))
    assert info.languages == ()
    assert info.gender is None


@patch("pyttsx3.init")
def test_init_failure_leaves_backend_unavailable(mock_init):
    mock_init.side_effect = RuntimeError("no driver")
    backend = Pyttsx3Backend(init_timeout_s=2.0)
    try:
        assert backend.available is False
        with pytest.raises(RuntimeError):
            backend.say("hi", rate=1, pitch=1, volume=1, voice_id=None, on_done=lambda: None)
    finally:
        backend.shutdown()


@patch("pyttsx3.init")
def test_say_runs_on_worker_and_calls_back(mock_init):
    engine = fake_engine([SimpleNamespace(id="v1", name="Female", languages=["en-US"], gender=None)])
    mock_init.return_value = engine
    backend = Pyttsx3Backend(init_timeout_s=2.0)
    try:
        assert backend.available
        assert backend.voices()[0].id == "v1"
        done = threading.Event()
        backend.say("Hello", rate=0.9, pitch=1.0, volume=0.8, voice_id="v1", on_done=done.set)
        assert done.wait(2.0)
        engine.setProperty.assert_any_call("rate", 180)
        engine.setProperty.assert_any_call("volume", 0.8)
        engine.setProperty.assert_any_call("voice", "v1")
        engine.say.assert_called_with("Hello")
    finally:
        backend.shutdown()
    assert backend.available is False


@patch("pyttsx3.init")
def test_engine_error_still_calls_back(mock_init):
    engine = fake_engine()
    engine.runAndWait.side_effect = RuntimeError("device lost")
    mock_init.return_value = engine
    backend = Pyttsx3Backend(init_timeout_s=2.0)
    try:
        done = threading.Event()
        backend.say("Hello", rate=1.0, pitch=1.0, volume=1.0, voice_id=None, on_done=done.set)
        assert done.wait(2.0)
    finally:
        backend.shutdown()


@patch("pyttsx3.init")
def test_stop_interrupts_engine_on_worker_thread(mock_init):
    engine = fake_engine()
    callbacks = {}
    engine.connect.side_effect = lambda topic, cb: callbacks.setdefault(topic, cb)
    stop_threads = []
    engine.stop.side_effect = lambda: stop_threads.append(threading.current_thread().name)
    speaking = threading.Event()
    release = threading.Event()

    def run_and_wait():
        speaking.set()
        release.wait(2.0)
        # the driver reports the next word while the utterance is still playing
        callbacks["started-word"](name=None, location=0, length=1)

    engine.runAndWait.side_effect = run_and_wait
    mock_init.return_value = engine
    backend = Pyttsx3Backend(init_timeout_s=2.0)
    try:
        done = threading.Event()
        backend.say("A long instruction", rate=1.0, pitch=1.0, volume=1.0, voice_id=None, on_done=done.set)
        assert speaking.wait(2.0)
        backend.stop()
        assert stop_threads == []
        release.set()
        assert done.wait(2.0)
        assert stop_threads == ["speech-worker"]
    finally:
        backend.shutdown()


@patch("pyttsx3.init")
def test_stop_reports_dropped_utterances_done(mock_init):
    engine = fake_engine()
    started = threading.Event()
    release = threading.Event()
    engine.runAndWait.side_effect = lambda: (started.set(), release.wait(2.0))
    mock_init.return_value = engine
    backend = Pyttsx3Backend(init_timeout_s=2.0)
    try:
        first, second = threading.Event(), threading.Event()
        backend.say("one", rate=1.0, pitch=1.0, volume=1.0, voice_id=None, on_done=first.set)
        assert started.wait(2.0)
        backend.say("two", rate=1.0, pitch=1.0, volume=1.0, voice_id=None, on_done=second.set)
        backend.stop()
        assert second.is_set()
        release.set()
        assert first.wait(2.0)
        engine.say.assert_called_once_with("one")
    finally:
        release.set()
        backend.shutdown()
