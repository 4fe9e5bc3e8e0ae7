"""pytest configuration file."""

import pytest, os, logging, random

# Qt widgets render without a display during tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from morningpractice.config import PracticeConfig
from morningpractice.engine.scheduling import ManualScheduler
from morningpractice.engine.narrator import Narrator
from morningpractice.engine.speech import SpeechBackend, VoiceInfo

pytest_plugins = [
    "pytest_asyncio",
]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (may take several seconds)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "gui: marks tests that create Qt widgets"
    )


@pytest.fixture(autouse=True, scope="session")
def _isolate_user_files(tmp_path_factory):
    # Keep config/log lookups away from the real home directory
    home = tmp_path_factory.mktemp("xdg")
    os.environ["XDG_CONFIG_HOME"] = str(home)
    os.environ["APPDATA"] = str(home)
    os.environ.pop("MORNINGPRACTICE_CONFIG", None)
    logging.getLogger("asyncio").setLevel(logging.ERROR)
    yield


class FakeSpeechBackend(SpeechBackend):
    """Records utterances; completion is delivered by calling finish()."""

    def __init__(self, voices=None, available=True, fail=False):
        self._voices = list(voices or [])
        self._available = available
        self.fail = fail
        self.spoken = []
        self.pending = []
        self.stop_calls = 0
        self.shut_down = False
        self.last_kwargs = None

    @property
    def available(self):
        return self._available

    def voices(self):
        return list(self._voices)

    def say(self, text, *, rate, pitch, volume, voice_id, on_done):
        if self.fail:
            raise RuntimeError("engine busy")
        self.spoken.append(text)
        self.last_kwargs = dict(rate=rate, pitch=pitch, volume=volume, voice_id=voice_id)
        self.pending.append(on_done)

    def stop(self):
        self.stop_calls += 1

    def shutdown(self):
        self.shut_down = True
        self._available = False

    def finish(self):
        """Complete the oldest queued utterance (as the worker thread would)."""
        on_done = self.pending.pop(0)
        on_done()


class FakeChime:
    def __init__(self):
        self.muted = False
        self.rings = 0
        self.closed = False

    def ring(self):
        if self.muted:
            return False
        self.rings += 1
        return True

    def close(self):
        self.closed = True


@pytest.fixture
def config():
    return PracticeConfig()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def backend():
    return FakeSpeechBackend(voices=[
        VoiceInfo(id="en-f", name="English Female", languages=("en-US",)),
        VoiceInfo(id="en-m", name="English Male", languages=("en-US",)),
    ])


@pytest.fixture
def narrator(backend, scheduler, config):
    return Narrator(backend, scheduler, config, language_tag="en-US")


@pytest.fixture
def chime():
    return FakeChime()


@pytest.fixture
def rng():
    return random.Random(1234)
