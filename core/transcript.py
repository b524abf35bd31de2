"""
Transcript Model
----------------
Segments produced by the speech engine and the history that merges
successive transcription runs.

Every stop re-transcribes the whole audio buffer, so a run replaces the
previous segment list. The boundary remembers where the previous run
ended and is only used to tell confirmed text from newly surfaced text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Tuple

# Segment timestamps are centiseconds from the first recorded sample
TICKS_PER_SECOND = 100


@dataclass(frozen=True)
class Segment:
    """One timestamped unit of transcribed text."""

    text: str
    start: int
    stop: int

    @classmethod
    def from_seconds(cls, text: str, start: float, stop: float) -> "Segment":
        return cls(
            text=text,
            start=int(round(start * TICKS_PER_SECOND)),
            stop=int(round(stop * TICKS_PER_SECOND)),
        )

    def shifted(self, ticks: int) -> "Segment":
        """Same segment moved ``ticks`` later on the timeline."""
        return Segment(self.text, self.start + ticks, self.stop + ticks)

    def __str__(self) -> str:
        return f"[{self.start} - {self.stop}]: {self.text}"


class SegmentStatus(Enum):
    """Display classification of a segment relative to the boundary."""
    CONFIRMED = "confirmed"
    NEW = "new"


def classify(segment: Segment, boundary: int) -> SegmentStatus:
    """
    Classify a segment against the boundary of the previous run.

    Confirmed when it ends at or before the boundary, or when it straddles
    it. Only segments starting at or after the boundary (and ending past it)
    are new.
    """
    if segment.stop <= boundary or (segment.stop > boundary and segment.start < boundary):
        return SegmentStatus.CONFIRMED
    return SegmentStatus.NEW


@dataclass
class TranscriptHistory:
    """
    The latest transcription run plus the boundary of the one before.

    Invariant: ``boundary`` never decreases across ``merge`` calls.
    """

    segments: List[Segment] = field(default_factory=list)
    boundary: int = 0

    @property
    def last_stop(self) -> int:
        """Stop tick of the last segment, 0 when empty."""
        return self.segments[-1].stop if self.segments else 0

    def merge(self, segments: Sequence[Segment]) -> None:
        """Replace the segments with a fresh run over the full buffer."""
        self.boundary = max(self.boundary, self.last_stop)
        self.segments = list(segments)

    def classify(self, segment: Segment) -> SegmentStatus:
        return classify(segment, self.boundary)

    def lines(self) -> Iterator[Tuple[Segment, SegmentStatus]]:
        """Yield each segment with its display status."""
        for segment in self.segments:
            yield segment, self.classify(segment)

    def new_segments(self) -> List[Segment]:
        return [s for s, status in self.lines() if status is SegmentStatus.NEW]

    def text(self) -> str:
        """All segment texts joined with single spaces."""
        return " ".join(segment.text for segment in self.segments)

    def __len__(self) -> int:
        return len(self.segments)
