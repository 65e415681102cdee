"""Shared fixtures for script narrator tests."""

import asyncio

import numpy as np
import pytest

from script_narrator.session import NarrationSession
from script_narrator.tts import add_wav_header

SAMPLE_SCRIPT = "[Bob: Hi there]\nNarrator: Once upon a time\nnot a line"


def make_pcm(duration_ms=100, freq=440.0, rate=24000):
    """16-bit mono sine tone as raw little-endian PCM."""
    t = np.arange(int(rate * duration_ms / 1000)) / rate
    return (np.sin(2 * np.pi * freq * t) * 8000).astype("<i2").tobytes()


def make_wav(duration_ms=100, freq=440.0):
    return add_wav_header(make_pcm(duration_ms, freq))


class FakeOutput:
    """Stands in for the sound device.

    Records every start/stop. With auto_end, non-looping clips finish on the
    next turn of the event loop.
    """

    def __init__(self, auto_end=True):
        self.auto_end = auto_end
        self.started = []
        self.stopped = []
        self.closed = False

    def start(self, clip):
        self.started.append(clip)
        if self.auto_end and not clip.loop:
            asyncio.get_running_loop().call_soon(clip.mark_ended)

    def stop(self, clip):
        self.stopped.append(clip)

    def close(self):
        self.closed = True


@pytest.fixture
def wav_bytes():
    """100ms WAVE container as returned by the synthesis gateway."""
    return make_wav()


@pytest.fixture
def fake_output():
    return FakeOutput()


@pytest.fixture
def session():
    """Session with the two-line sample script parsed."""
    s = NarrationSession()
    s.set_script(SAMPLE_SCRIPT)
    return s


@pytest.fixture
def script_file(tmp_path):
    path = tmp_path / "story.txt"
    path.write_text(SAMPLE_SCRIPT)
    return str(path)
