"""
Session Controller
------------------
Central coordinator for a dictation session.
Toggles recording, runs transcription on stop and merges each run into
the transcript history.

Recording state is never duplicated here: ``is_running`` asks the capture.
"""

from collections import deque
from typing import Any, Callable, Deque, Iterator, List, Optional, Protocol, Sequence, Tuple
import contextvars
import logging

from .context import generate_session_id, reset_session_id, set_session_id
from .errors import ErrorHandler
from .transcript import Segment, SegmentStatus, TranscriptHistory


class Capture(Protocol):
    """What the controller needs from the microphone capture."""

    @property
    def is_recording(self) -> bool: ...

    @property
    def start_ticks(self) -> int: ...

    def start(self) -> Any: ...

    def stop(self, callback: Callable[..., Any]) -> Any: ...

    def read(self, callback: Callable[..., Any]) -> Any: ...

    def close(self) -> None: ...


class Transcriber(Protocol):
    """What the controller needs from the speech engine."""

    def transcribe(self, samples: Sequence[float]) -> List[Segment]: ...


class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


class SessionController:
    """
    Push-to-talk session controller.

    Responsibilities:
    - Start/stop toggling
    - Transcription on stop
    - Transcript history and boundary tracking
    - Notification log for the presentation layer

    Errors from capture or transcription propagate unchanged and leave the
    transcript history untouched.
    """

    def __init__(
        self,
        capture: Capture,
        engine: Transcriber,
        max_notifications: int = 50,
    ):
        self._capture = capture
        self._engine = engine
        self._history = TranscriptHistory()
        self._notifications: Deque[str] = deque(maxlen=max_notifications)
        self._error_handler = ErrorHandler()
        self._session_token: Optional[contextvars.Token] = None
        self._logger = logging.getLogger("murmur.session")

    @property
    def is_running(self) -> bool:
        """True while a recording session is in progress."""
        return self._capture.is_recording

    @property
    def history(self) -> TranscriptHistory:
        return self._history

    @property
    def segments(self) -> List[Segment]:
        return list(self._history.segments)

    @property
    def boundary(self) -> int:
        return self._history.boundary

    @property
    def notifications(self) -> List[str]:
        return list(self._notifications)

    @property
    def error_handler(self) -> ErrorHandler:
        return self._error_handler

    def toggle(self) -> Optional[List[Segment]]:
        """
        Start recording when idle, stop and transcribe when recording.

        Returns:
            The new segment list after a stop, None after a start
        """
        if self.is_running:
            return self._stop()
        self._start()
        return None

    def _start(self) -> None:
        self._capture.start()
        self._session_token = set_session_id(generate_session_id())
        self.notify("Started recording")

    def _stop(self) -> List[Segment]:
        try:
            segments = self._capture.stop(
                lambda samples, started_at: self._transcribe(samples)
            )
            self.notify("Stopped recording")
            self._merge(segments)
        finally:
            if not self.is_running:
                self._end_session()
        return segments

    def _end_session(self) -> None:
        if self._session_token is not None:
            reset_session_id(self._session_token)
            self._session_token = None

    def retry(self) -> List[Segment]:
        """
        Re-transcribe the buffer while idle, e.g. after an InferenceError.

        Raises:
            StreamControlError: If a recording is in progress
        """
        segments = self._capture.read(self._transcribe)
        self.notify("Retried transcription")
        self._merge(segments)
        return segments

    def _transcribe(self, samples: Sequence[float]) -> List[Segment]:
        # Runs under the buffer lock, so start_ticks matches samples[0]
        offset = self._capture.start_ticks
        segments = self._engine.transcribe(samples)
        if offset:
            segments = [segment.shifted(offset) for segment in segments]
        return segments

    def _merge(self, segments: Sequence[Segment]) -> None:
        previous = self._history.boundary
        self._history.merge(segments)
        self._logger.info(
            f"Transcript updated: {len(segments)} segments, "
            f"boundary {previous} → {self._history.boundary}"
        )

    def lines(self) -> Iterator[Tuple[Segment, SegmentStatus]]:
        """Segments with their confirmed/new display status."""
        return self._history.lines()

    def transcript_text(self) -> str:
        """Full transcript as one string, texts joined with single spaces."""
        return self._history.text()

    def copy_to_clipboard(self, clipboard: Clipboard) -> str:
        """Copy the transcript text and return it."""
        text = self.transcript_text()
        clipboard.copy(text)
        self.notify("Text copied to clipboard!")
        return text

    def notify(self, message: str) -> None:
        self._notifications.append(message)

    def report(self, exception: Exception) -> str:
        """Log an error and add its user-facing message to the notifications."""
        message = self._error_handler.handle(exception)
        self.notify(message)
        return message

    def shutdown(self) -> None:
        """Release the capture stream. Any session in progress is discarded."""
        self._end_session()
        self._capture.close()
        self._logger.info("Session controller shut down")
