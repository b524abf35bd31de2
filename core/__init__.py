# Core module - Data model, recording state and session control
# Imports nothing from audio/, stt/ or infra/; those packages depend on core

from .errors import (
    MurmurError, DeviceError, StreamControlError, AlreadyStoppedError,
    ModelLoadError, InferenceError, ClipboardError,
    ErrorCategory, ErrorHandler, ErrorRecord,
)
from .state_machine import Idle, Recording, RecordingState, RecordingStateMachine, StateTransition
from .transcript import Segment, SegmentStatus, TranscriptHistory, classify
from .session import SessionController

__all__ = [
    "MurmurError", "DeviceError", "StreamControlError", "AlreadyStoppedError",
    "ModelLoadError", "InferenceError", "ClipboardError",
    "ErrorCategory", "ErrorHandler", "ErrorRecord",
    "Idle", "Recording", "RecordingState", "RecordingStateMachine", "StateTransition",
    "Segment", "SegmentStatus", "TranscriptHistory", "classify",
    "SessionController",
]
