"""
Microphone Capture Module
-------------------------
Push-to-talk audio capture using sounddevice.

The input stream is opened once on the default device and paused between
sessions. Every block the driver delivers is appended to a process-wide
AudioBuffer; stopping pauses the stream and hands the whole buffer to a
callback while appends are locked out.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, TypeVar
import logging
import numpy as np

try:
    import sounddevice as sd
except (ImportError, OSError):
    # OSError: sounddevice installed but the PortAudio library is missing
    sd = None

from core.errors import AlreadyStoppedError, DeviceError, StreamControlError
from core.state_machine import RecordingState, RecordingStateMachine

from .audio_buffer import AudioBuffer


T = TypeVar("T")


@dataclass(frozen=True)
class CaptureConfig:
    """Configuration for microphone capture. Not user-configurable."""
    sample_rate: int = 16000
    channels: int = 1
    dtype: str = "float32"
    block_size: int = 1024  # Samples per callback


class MicrophoneCapture:
    """
    Push-to-talk microphone capture.

    Usage:
        capture = MicrophoneCapture()
        capture.start()  # Begin recording
        # ... user speaks ...
        segments = capture.stop(lambda samples, started_at: engine.transcribe(samples))
    """

    def __init__(
        self,
        config: Optional[CaptureConfig] = None,
        buffer: Optional[AudioBuffer] = None,
    ):
        self.config = config or CaptureConfig()
        self._logger = logging.getLogger("murmur.audio.capture")
        if buffer is None:
            buffer = AudioBuffer(sample_rate=self.config.sample_rate)
        self._buffer = buffer
        self._state = RecordingStateMachine()
        self._stream = self._open_stream()

    def _open_stream(self):
        if sd is None:
            raise DeviceError(
                "sounddevice is not available. Install with: pip install sounddevice "
                "(requires the PortAudio library)"
            )

        try:
            device = sd.query_devices(kind="input")
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceError(f"Failed to get default input device: {e}") from e

        try:
            stream = sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype=self.config.dtype,
                blocksize=self.config.block_size,
                callback=self._audio_callback
            )
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceError(f"Failed to open input stream: {e}") from e

        self._logger.info(
            f"Opened input stream on '{device['name']}' "
            f"({self.config.sample_rate} Hz, {self.config.channels} ch, "
            f"block {self.config.block_size})"
        )
        return stream

    def _audio_callback(
        self,
        indata: np.ndarray,
        frames: int,
        time_info,
        status
    ) -> None:
        """Callback for audio frames from sounddevice. Must not block."""
        if status:
            self._logger.warning(f"Input stream status: {status}")

        audio_data = indata[:, 0] if indata.ndim > 1 else indata
        self._buffer.append(audio_data)

    @property
    def buffer(self) -> AudioBuffer:
        return self._buffer

    @property
    def state(self) -> RecordingState:
        return self._state.state

    @property
    def state_machine(self) -> RecordingStateMachine:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state.is_recording

    @property
    def buffered_seconds(self) -> float:
        """Total audio held in the buffer across all sessions."""
        return self._buffer.duration_seconds

    @property
    def start_ticks(self) -> int:
        """Where the buffer starts on the recording timeline, in centiseconds."""
        return self._buffer.start_ticks

    def start(self) -> datetime:
        """
        Start recording audio.

        Returns:
            The session start timestamp (UTC)

        Raises:
            StreamControlError: If the driver refuses to start the stream
        """
        if not self._stream.active:
            try:
                self._stream.start()
            except sd.PortAudioError as e:
                raise StreamControlError(f"Failed to start input stream: {e}") from e

        if self._state.is_recording:
            return self._state.started_at

        return self._state.begin().started_at

    def stop_without_callback(self) -> datetime:
        """
        Pause the stream and end the session. The buffer is kept.

        Returns:
            The timestamp recorded by the matching start()

        Raises:
            AlreadyStoppedError: If no recording is in progress
            StreamControlError: If the driver refuses to pause the stream
        """
        if not self._state.is_recording:
            raise AlreadyStoppedError("Stream is already stopped")

        try:
            self._stream.stop()
        except sd.PortAudioError as e:
            raise StreamControlError(f"Failed to pause input stream: {e}") from e

        started_at = self._state.end()
        self._logger.info(f"Capture paused, buffer holds {self.buffered_seconds:.2f}s")
        return started_at

    def stop(self, callback: Callable[[np.ndarray, datetime], T]) -> T:
        """
        Stop recording and run ``callback(samples, started_at)`` over the full
        buffer.

        The buffer lock is held while the callback runs; the callback must not
        call back into this capture.
        """
        started_at = self.stop_without_callback()

        with self._buffer.locked_view() as samples:
            return callback(samples, started_at)

    def read(self, callback: Callable[[np.ndarray], T]) -> T:
        """
        Run ``callback(samples)`` over the full buffer while idle.

        Raises:
            StreamControlError: If a recording is in progress
        """
        if self._state.is_recording:
            raise StreamControlError("Cannot read the buffer while recording")

        with self._buffer.locked_view() as samples:
            return callback(samples)

    def close(self) -> None:
        """Stop and release the input stream."""
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        except sd.PortAudioError as e:
            self._logger.warning(f"Error closing input stream: {e}")
        self._stream = None
        self._logger.info("Input stream closed")

    def __enter__(self) -> "MicrophoneCapture":
        return self

    def __exit__(self, *args) -> None:
        self.close()
