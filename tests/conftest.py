import json
from pathlib import Path

import numpy as np
import pytest

from realtime_voice.exceptions import NotConnectedError, PlaybackError


class FakeTransport:
    def __init__(self, is_open=True):
        self.is_open = is_open
        self.sent = []
        self.closed = False

    def send_json(self, message):
        if not self.is_open:
            raise NotConnectedError("closed")
        # Round-trip through JSON so tests see exactly what goes on the wire.
        self.sent.append(json.loads(json.dumps(message)))

    def close(self):
        self.closed = True
        self.is_open = False


class FakeSink:
    def __init__(self):
        self.calls = []
        self.written = []
        self.active = False

    def open(self):
        self.calls.append("open")
        self.active = True

    def write(self, chunk):
        if not self.active:
            raise PlaybackError("sink is not active")
        self.written.append(chunk)

    def close(self):
        self.calls.append("close")
        self.active = False


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class FakeScheduler:
    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer


class SilentCapture:
    """Writes one second of silence when stopped, like a quiet microphone."""

    def __init__(self, sample_rate=24000):
        self.sample_rate = sample_rate
        self.calls = []
        self._path = None

    def start(self, path: Path):
        self.calls.append(("start", path))
        self._path = path

    def stop(self):
        import soundfile as sf

        self.calls.append(("stop", self._path))
        sf.write(str(self._path), np.zeros(self.sample_rate, dtype="float32"), self.sample_rate, subtype="PCM_16")
        self._path = None


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def sink():
    sink = FakeSink()
    sink.open()
    sink.calls.clear()
    return sink


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def capture():
    return SilentCapture()
