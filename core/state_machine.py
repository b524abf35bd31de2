"""
Recording State Machine
-----------------------
Idle / Recording lifecycle owned by the microphone capture.
All state transitions are validated, logged and kept in a history.

The capture is the single source of truth for "are we recording";
everything else queries it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
import logging


@dataclass(frozen=True)
class Idle:
    """Not recording."""

    name = "IDLE"


@dataclass(frozen=True)
class Recording:
    """Recording since ``started_at`` (UTC)."""

    started_at: datetime

    name = "RECORDING"


RecordingState = Union[Idle, Recording]


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: RecordingState
    to_state: RecordingState
    timestamp: datetime
    reason: str
    metadata: Dict = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"StateTransition({self.from_state.name} → {self.to_state.name}, "
            f"reason='{self.reason}')"
        )


class RecordingStateMachine:
    """
    Two-state machine for a capture session.

    Idle → Recording on start, Recording → Idle on stop.
    Any other transition raises ValueError.
    """

    def __init__(self, history_size: int = 100):
        self._state: RecordingState = Idle()
        self._history: List[StateTransition] = []
        self._history_size = history_size
        self._logger = logging.getLogger("murmur.state")

    @property
    def state(self) -> RecordingState:
        """Get current state."""
        return self._state

    @property
    def is_recording(self) -> bool:
        return isinstance(self._state, Recording)

    @property
    def started_at(self) -> Optional[datetime]:
        """Start of the current session, None when idle."""
        if isinstance(self._state, Recording):
            return self._state.started_at
        return None

    @property
    def history(self) -> List[StateTransition]:
        """Get transition history."""
        return self._history.copy()

    def begin(self, reason: str = "Recording started") -> Recording:
        """
        Transition Idle → Recording, stamping the current UTC time.

        Raises:
            ValueError: If already recording
        """
        if self.is_recording:
            raise ValueError(f"Invalid transition: {self._state.name} → RECORDING")

        recording = Recording(started_at=datetime.now(timezone.utc))
        self._transition(recording, reason)
        return recording

    def end(self, reason: str = "Recording stopped") -> datetime:
        """
        Transition Recording → Idle.

        Returns:
            The ``started_at`` of the session that just ended

        Raises:
            ValueError: If idle
        """
        if not isinstance(self._state, Recording):
            raise ValueError(f"Invalid transition: {self._state.name} → IDLE")

        started_at = self._state.started_at
        self._transition(Idle(), reason, {"started_at": started_at.isoformat()})
        return started_at

    def _transition(
        self,
        to_state: RecordingState,
        reason: str,
        metadata: Optional[Dict] = None
    ) -> StateTransition:
        transition = StateTransition(
            from_state=self._state,
            to_state=to_state,
            timestamp=datetime.now(timezone.utc),
            reason=reason,
            metadata=metadata or {}
        )

        old_state = self._state
        self._state = to_state

        self._history.append(transition)
        if len(self._history) > self._history_size:
            self._history.pop(0)

        self._logger.info(
            f"State transition: {old_state.name} → {to_state.name} "
            f"(reason: {reason})"
        )

        return transition
