"""
murmur Test Configuration
-------------------------
Shared fixtures and configuration for all tests.

No test touches real audio hardware or model weights: sounddevice and
faster-whisper are replaced by the fakes below.
"""

import sys
from collections import namedtuple
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import audio.mic_capture as mic_capture
import stt.whisper_engine as whisper_engine
from core.context import reset_session_id, set_session_id
from core.transcript import Segment


# =============================================================================
# sounddevice
# =============================================================================

class FakePortAudioError(Exception):
    pass


class FakeInputStream:
    """Input stream whose callback the test drives through feed()."""

    def __init__(self, samplerate, channels, dtype, blocksize, callback):
        self.samplerate = samplerate
        self.channels = channels
        self.dtype = dtype
        self.blocksize = blocksize
        self.callback = callback
        self.active = False
        self.closed = False
        self.fail_start = False
        self.fail_stop = False
        self.start_calls = 0

    def start(self):
        self.start_calls += 1
        if self.fail_start:
            raise FakePortAudioError("Error starting stream")
        self.active = True

    def stop(self):
        if self.fail_stop:
            raise FakePortAudioError("Error stopping stream")
        self.active = False

    def close(self):
        self.closed = True

    def feed(self, samples, status=None):
        """Deliver one block, shaped (frames, channels) like the driver does."""
        indata = np.asarray(samples, dtype=np.float32).reshape(-1, self.channels)
        self.callback(indata, len(indata), None, status)


class FakeSoundDevice:
    PortAudioError = FakePortAudioError

    def __init__(self):
        self.streams: List[FakeInputStream] = []
        self.has_input = True
        self.fail_open = False

    def query_devices(self, kind=None):
        if not self.has_input:
            raise FakePortAudioError("Error querying device -1")
        return {"name": "Fake Microphone", "max_input_channels": 1}

    def InputStream(self, **kwargs):
        if self.fail_open:
            raise FakePortAudioError("Invalid sample rate")
        stream = FakeInputStream(**kwargs)
        self.streams.append(stream)
        return stream

    @property
    def stream(self) -> FakeInputStream:
        return self.streams[-1]


@pytest.fixture
def fake_sd(monkeypatch):
    """Replace sounddevice inside the capture module."""
    fake = FakeSoundDevice()
    monkeypatch.setattr(mic_capture, "sd", fake)
    return fake


@pytest.fixture
def capture(fake_sd):
    """A MicrophoneCapture on the fake default input device."""
    return mic_capture.MicrophoneCapture()


# =============================================================================
# faster-whisper
# =============================================================================

FakeWhisperSegment = namedtuple("FakeWhisperSegment", ["text", "start", "end"])

WORDS = ["hello", "world", "again", "and", "more"]


def one_word_per_second(audio: np.ndarray) -> List[FakeWhisperSegment]:
    """One segment per full second of audio, deterministic in the buffer length."""
    seconds = len(audio) // 16000
    return [
        FakeWhisperSegment(f" {WORDS[i % len(WORDS)]}", float(i), float(i + 1))
        for i in range(seconds)
    ]


class FakeWhisperModel:
    """Stands in for faster_whisper.WhisperModel."""

    instances: List["FakeWhisperModel"] = []
    script: Callable[[np.ndarray], List[FakeWhisperSegment]] = staticmethod(one_word_per_second)
    fail_load: Optional[Exception] = None

    def __init__(self, model_size_or_path, device="auto", compute_type="default"):
        if FakeWhisperModel.fail_load is not None:
            raise FakeWhisperModel.fail_load
        self.model_size_or_path = model_size_or_path
        self.device = device
        self.compute_type = compute_type
        self.calls = []
        self.error: Optional[Exception] = None
        FakeWhisperModel.instances.append(self)

    def transcribe(self, audio, **kwargs):
        self.calls.append((np.array(audio, copy=True), kwargs))
        if self.error is not None:
            raise self.error
        segments = type(self).script(audio)
        return (s for s in segments), {"language": "en"}


@pytest.fixture
def fake_whisper(monkeypatch):
    """Replace WhisperModel inside the engine module."""
    monkeypatch.setattr(FakeWhisperModel, "instances", [])
    monkeypatch.setattr(FakeWhisperModel, "fail_load", None)
    monkeypatch.setattr(FakeWhisperModel, "script", staticmethod(one_word_per_second))
    monkeypatch.setattr(whisper_engine, "WhisperModel", FakeWhisperModel)
    return FakeWhisperModel


@pytest.fixture
def engine(fake_whisper):
    return whisper_engine.WhisperEngine(whisper_engine.STTConfig(model="base.en"))


# =============================================================================
# Scripted engine for controller tests
# =============================================================================

class ScriptedEngine:
    """Returns queued segment lists, one per transcribe() call."""

    def __init__(self, *runs: List[Segment]):
        self.runs = list(runs)
        self.calls: List[int] = []
        self.error: Optional[Exception] = None

    def transcribe(self, samples) -> List[Segment]:
        self.calls.append(len(samples))
        if self.error is not None:
            raise self.error
        return self.runs.pop(0)


def seconds(n: float) -> np.ndarray:
    """n seconds of quiet 16 kHz audio."""
    return np.full(int(16000 * n), 0.01, dtype=np.float32)


@pytest.fixture(autouse=True)
def clear_session_id():
    """Sessions left open by a test must not leak their id into the next."""
    token = set_session_id(None)
    yield
    reset_session_id(token)
