"""
Audio Buffer Module
-------------------
Append-only store of mono float32 samples shared between the capture
callback (sole writer) and the session controller (sole reader).

The buffer lives for the whole process and spans every recording
session. Samples sit in a growable numpy arena; appends copy into spare
capacity and double it when full.

With a retention cap the oldest samples are dropped by advancing a head
offset. The retained tail is only moved back to the front of the arena
once the dropped prefix fills half of it, so a single append never
copies more than its own frame plus, rarely, one cap's worth of samples.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
import logging
import threading
import numpy as np

from core.transcript import TICKS_PER_SECOND


class AudioBuffer:
    """
    Lock-guarded, append-only sample buffer.

    Only ``append`` and ``locked_view`` touch the samples. The view is a
    numpy slice of the arena and is only valid while the lock is held.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        initial_capacity: int = 16000 * 30,
        max_retention_seconds: Optional[float] = None,
    ):
        self.sample_rate = sample_rate
        self.max_retention_seconds = max_retention_seconds
        self._max_samples = (
            int(sample_rate * max_retention_seconds)
            if max_retention_seconds is not None else None
        )
        self._data = np.empty(max(initial_capacity, 1), dtype=np.float32)
        self._head = 0  # Arena index of the oldest retained sample
        self._end = 0
        self._dropped = 0
        self._lock = threading.Lock()
        self._logger = logging.getLogger("murmur.audio.buffer")

        if self._max_samples is not None:
            self._logger.warning(
                f"Audio retention capped at {max_retention_seconds}s; "
                "older audio is dropped from transcription"
            )

    def append(self, frame: np.ndarray) -> None:
        """Append a frame of samples. Called from the real-time callback."""
        samples = np.asarray(frame, dtype=np.float32).reshape(-1)
        if self._max_samples is not None and len(samples) > self._max_samples:
            skipped = len(samples) - self._max_samples
            samples = samples[skipped:]
        else:
            skipped = 0

        with self._lock:
            self._dropped += skipped
            needed = self._end + len(samples)
            if needed > len(self._data):
                self._make_room(len(samples))
                needed = self._end + len(samples)
            self._data[self._end:needed] = samples
            self._end = needed

            if self._max_samples is not None:
                excess = self._end - self._head - self._max_samples
                if excess > 0:
                    self._head += excess
                    self._dropped += excess

    def _make_room(self, count: int) -> None:
        size = self._end - self._head
        if self._head and self._head >= len(self._data) // 2:
            self._data[:size] = self._data[self._head:self._end]
            self._head, self._end = 0, size
            if size + count <= len(self._data):
                return

        capacity = len(self._data)
        while capacity < size + count:
            capacity *= 2
        grown = np.empty(capacity, dtype=np.float32)
        grown[:size] = self._data[self._head:self._end]
        self._data = grown
        self._head, self._end = 0, size

    @contextmanager
    def locked_view(self) -> Iterator[np.ndarray]:
        """
        Hold the lock and yield a read-only view of every buffered sample.

        Appends from the capture thread block until the context exits, so
        keep the body short unless the stream is paused.
        """
        with self._lock:
            view = self._data[self._head:self._end]
            view.flags.writeable = False
            yield view

    def snapshot(self) -> np.ndarray:
        """Copy of every buffered sample."""
        with self.locked_view() as view:
            return view.copy()

    def __len__(self) -> int:
        with self._lock:
            return self._end - self._head

    @property
    def duration_seconds(self) -> float:
        return len(self) / self.sample_rate

    @property
    def dropped_samples(self) -> int:
        """Samples discarded by the retention cap, 0 when uncapped."""
        return self._dropped

    @property
    def start_ticks(self) -> int:
        """
        Stream position of the oldest retained sample, in centiseconds.

        Lock-free so it can be read from inside ``locked_view``.
        """
        return self._dropped * TICKS_PER_SECOND // self.sample_rate
