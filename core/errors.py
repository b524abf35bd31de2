"""
Error Handling Module
---------------------
Typed errors for capture, transcription and export, plus a central
handler that logs them and turns them into user-facing notifications.

Only startup failures (no input device, unloadable model) are fatal.
Everything raised during a session is recoverable and must leave the
session state consistent.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    DEVICE = auto()          # No input device / stream could not be opened
    STREAM_CONTROL = auto()  # play/pause failed at the driver level
    USER_ERROR = auto()      # e.g. stop while idle
    MODEL_LOAD = auto()      # Model weights missing or unloadable
    INFERENCE = auto()       # Model invocation failed
    CLIPBOARD = auto()       # Clipboard export failed


class MurmurError(Exception):
    """Base class for all errors raised by murmur."""

    category: ErrorCategory = ErrorCategory.USER_ERROR
    recoverable: bool = True

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.category.name}: {self.message})"


class DeviceError(MurmurError):
    """No input device found, or the input stream could not be built."""
    category = ErrorCategory.DEVICE
    recoverable = False


class StreamControlError(MurmurError):
    """Starting or pausing the input stream failed."""
    category = ErrorCategory.STREAM_CONTROL


class AlreadyStoppedError(MurmurError):
    """stop() was called while no recording was in progress."""
    category = ErrorCategory.USER_ERROR


class ModelLoadError(MurmurError):
    """The speech model could not be loaded."""
    category = ErrorCategory.MODEL_LOAD
    recoverable = False


class InferenceError(MurmurError):
    """The speech model failed while transcribing a buffer."""
    category = ErrorCategory.INFERENCE


class ClipboardError(MurmurError):
    """The transcript could not be copied to the clipboard."""
    category = ErrorCategory.CLIPBOARD


@dataclass
class ErrorRecord:
    """An error as seen by the handler."""
    category: ErrorCategory
    message: str
    recoverable: bool
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_exception(cls, exception: Exception) -> "ErrorRecord":
        """Create a record from any exception; unknown ones are fatal."""
        if isinstance(exception, MurmurError):
            return cls(
                category=exception.category,
                message=exception.message,
                recoverable=exception.recoverable,
                details=dict(exception.details),
            )
        return cls(
            category=ErrorCategory.DEVICE,
            message=str(exception) or type(exception).__name__,
            recoverable=False,
        )


class ErrorHandler:
    """
    Central error handler with logging and a bounded history.
    """

    LEVELS: Dict[ErrorCategory, int] = {
        ErrorCategory.USER_ERROR: logging.INFO,
        ErrorCategory.STREAM_CONTROL: logging.ERROR,
        ErrorCategory.INFERENCE: logging.ERROR,
        ErrorCategory.CLIPBOARD: logging.WARNING,
        ErrorCategory.DEVICE: logging.CRITICAL,
        ErrorCategory.MODEL_LOAD: logging.CRITICAL,
    }

    def __init__(self, max_history: int = 100):
        self._logger = logging.getLogger("murmur.errors")
        self._error_history: List[ErrorRecord] = []
        self._max_history = max_history

    def handle(self, exception: Exception) -> str:
        """
        Log an error, remember it, and return a user-friendly message.
        """
        record = ErrorRecord.from_exception(exception)
        self._log_error(record)

        self._error_history.append(record)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return self._get_user_message(record)

    def _log_error(self, record: ErrorRecord) -> None:
        level = self.LEVELS.get(record.category, logging.ERROR)
        self._logger.log(
            level,
            f"{record.category.name}: {record.message}",
            extra={"details": record.details},
        )

    def _get_user_message(self, record: ErrorRecord) -> str:
        messages = {
            ErrorCategory.DEVICE: f"Audio device error: {record.message}",
            ErrorCategory.STREAM_CONTROL: f"Could not control the audio stream: {record.message}",
            ErrorCategory.USER_ERROR: record.message,
            ErrorCategory.MODEL_LOAD: f"Could not load model: {record.message}",
            ErrorCategory.INFERENCE: (
                f"Transcription failed: {record.message}. "
                "Audio was kept, the next stop will retry."
            ),
            ErrorCategory.CLIPBOARD: f"Error copying to clipboard: {record.message}",
        }
        return messages.get(record.category, "An error occurred.")

    @property
    def history(self) -> List[ErrorRecord]:
        return self._error_history.copy()

    def get_error_stats(self) -> Dict[str, int]:
        """Get error counts per category."""
        stats: Dict[str, int] = {}
        for record in self._error_history:
            key = record.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    def clear_history(self) -> None:
        self._error_history.clear()
