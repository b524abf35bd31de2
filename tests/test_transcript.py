"""
Transcript Tests
----------------
Segment formatting, boundary tracking and confirmed/new classification.
"""

import pytest

from core.transcript import Segment, SegmentStatus, TranscriptHistory, classify


class TestSegment:

    def test_display_format(self):
        assert str(Segment("hello", 0, 100)) == "[0 - 100]: hello"

    def test_from_seconds(self):
        assert Segment.from_seconds("x", 1.0, 2.5) == Segment("x", 100, 250)
        assert Segment.from_seconds("x", 0.0, 0.5) == Segment("x", 0, 50)


class TestClassify:

    @pytest.mark.parametrize("start, stop, boundary, expected", [
        (0, 50, 100, SegmentStatus.CONFIRMED),    # ends before
        (0, 100, 100, SegmentStatus.CONFIRMED),   # ends on the boundary
        (50, 150, 100, SegmentStatus.CONFIRMED),  # straddles
        (100, 150, 100, SegmentStatus.NEW),       # starts on the boundary
        (120, 150, 100, SegmentStatus.NEW),       # entirely after
        (0, 100, 0, SegmentStatus.NEW),           # first run
    ])
    def test_rule(self, start, stop, boundary, expected):
        assert classify(Segment("t", start, stop), boundary) is expected


class TestTranscriptHistory:

    def test_starts_empty(self):
        history = TranscriptHistory()

        assert history.segments == []
        assert history.boundary == 0
        assert history.last_stop == 0

    def test_empty_run_keeps_boundary_at_zero(self):
        history = TranscriptHistory()

        history.merge([])

        assert history.boundary == 0
        assert history.segments == []

    def test_two_runs(self):
        history = TranscriptHistory()
        hello = Segment("hello", 0, 100)
        world = Segment("world", 100, 250)

        history.merge([hello])
        assert history.boundary == 0
        assert list(history.lines()) == [(hello, SegmentStatus.NEW)]

        history.merge([hello, world])
        assert history.boundary == 100
        assert list(history.lines()) == [
            (hello, SegmentStatus.CONFIRMED),
            (world, SegmentStatus.NEW),
        ]
        assert history.new_segments() == [world]

    def test_merge_replaces_segments(self):
        history = TranscriptHistory()

        history.merge([Segment("helo", 0, 90)])
        history.merge([Segment("hello", 0, 100), Segment("there", 100, 180)])

        assert [s.text for s in history.segments] == ["hello", "there"]
        assert history.boundary == 90

    def test_boundary_never_decreases(self):
        history = TranscriptHistory()
        boundaries = []

        for run in (
            [Segment("a", 0, 100)],
            [Segment("a", 0, 100), Segment("b", 100, 200)],
            [Segment("a", 0, 150)],
            [],
            [Segment("a", 0, 100), Segment("b", 100, 300)],
        ):
            history.merge(run)
            boundaries.append(history.boundary)

        assert boundaries == [0, 100, 200, 200, 200]
        assert boundaries == sorted(boundaries)

    def test_text_joins_with_spaces(self):
        history = TranscriptHistory()

        history.merge([Segment("a", 0, 10), Segment("b", 10, 20)])

        assert history.text() == "a b"

    def test_text_when_empty(self):
        assert TranscriptHistory().text() == ""
