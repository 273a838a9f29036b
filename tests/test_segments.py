"""Tests for candidate segment building."""
import pytest

from viralclip.pipeline.segments import (
    CandidateSegment,
    ScoredSegment,
    TranscriptLine,
    build_segments,
)


def _lines(count: int, seconds: float = 10.0):
    return [
        TranscriptLine(text=f"line {i}", start=i * seconds, end=(i + 1) * seconds)
        for i in range(count)
    ]


class TestCandidateSegment:
    """Tests for segment dataclasses."""

    def test_duration(self):
        seg = CandidateSegment(text="x", start_time=10.0, end_time=25.0)
        assert seg.duration == 15.0

    def test_repr(self):
        seg = CandidateSegment(text="x", start_time=0.0, end_time=10.0)
        assert "0.00-10.00" in repr(seg)
        assert "dur=10.00s" in repr(seg)

    def test_scored_segment_delegates(self):
        seg = CandidateSegment(text="hello", start_time=5.0, end_time=20.0)
        scored = ScoredSegment(segment=seg, virality_score=7.5)
        assert scored.text == "hello"
        assert scored.start_time == 5.0
        assert scored.end_time == 20.0
        assert scored.duration == 15.0


class TestBuildSegments:
    """Tests for the sliding window."""

    @pytest.mark.parametrize("count", [2, 3, 4, 7, 12])
    def test_length_minus_one_segments(self, count):
        assert len(build_segments(_lines(count))) == count - 1

    @pytest.mark.parametrize("count", [0, 1])
    def test_short_transcript_yields_nothing(self, count):
        assert build_segments(_lines(count)) == []

    def test_window_contents(self):
        segments = build_segments(_lines(4))

        assert segments[0].text == "line 0 line 1 line 2"
        assert segments[0].start_time == 0.0
        assert segments[0].end_time == 30.0

        assert segments[1].text == "line 1 line 2 line 3"
        assert segments[1].start_time == 10.0
        assert segments[1].end_time == 40.0

    def test_trailing_window_is_shorter(self):
        """Windows near the end hold fewer lines."""
        segments = build_segments(_lines(4))
        assert segments[-1].text == "line 2 line 3"
        assert segments[-1].duration == 20.0

    def test_windows_advance_by_one_line(self):
        segments = build_segments(_lines(6))
        starts = [s.start_time for s in segments]
        assert starts == [0.0, 10.0, 20.0, 30.0, 40.0]

    def test_deterministic(self):
        lines = _lines(5)
        assert build_segments(lines) == build_segments(lines)

    def test_uneven_line_timing(self):
        lines = [
            TranscriptLine("a", 0.0, 3.5),
            TranscriptLine("b", 4.0, 9.0),
            TranscriptLine("c", 9.0, 21.25),
        ]
        segments = build_segments(lines)
        assert segments[0].duration == 21.25
        assert segments[1].start_time == 4.0
        assert segments[1].duration == pytest.approx(17.25)
