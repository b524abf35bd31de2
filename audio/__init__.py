# Audio module - Microphone capture and the shared sample buffer

from .audio_buffer import AudioBuffer
from .mic_capture import MicrophoneCapture, CaptureConfig

__all__ = ["AudioBuffer", "MicrophoneCapture", "CaptureConfig"]
