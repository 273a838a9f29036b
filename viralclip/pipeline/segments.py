"""Candidate segment building from timestamped transcript lines."""
from dataclasses import dataclass
from typing import List, Sequence

# Lines per candidate window
WINDOW_SIZE = 3


@dataclass(frozen=True)
class TranscriptLine:
    """One timestamped line from the transcription service."""
    text: str
    start: float
    end: float

    def to_dict(self) -> dict:
        return {"text": self.text, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class CandidateSegment:
    """Contiguous window of transcript lines considered as one clip."""
    text: str
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def __repr__(self):
        return f"CandidateSegment({self.start_time:.2f}-{self.end_time:.2f}, dur={self.duration:.2f}s)"


def build_segments(
    lines: Sequence[TranscriptLine],
    window_size: int = WINDOW_SIZE,
) -> List[CandidateSegment]:
    """
    Slide a window over the transcript, advancing one line at a time.

    A window starts at every index except the last one, so a transcript of
    L lines yields L - 1 overlapping segments (zero for L <= 1). Windows near
    the end are shorter than window_size.

    Args:
        lines: Ordered transcript lines
        window_size: Maximum number of lines per segment

    Returns:
        List of candidate segments in transcript order
    """
    segments = []

    for i in range(len(lines) - 1):
        window = lines[i:i + window_size]
        segments.append(CandidateSegment(
            text=" ".join(line.text for line in window),
            start_time=window[0].start,
            end_time=window[-1].end,
        ))

    return segments


@dataclass(frozen=True)
class ScoredSegment:
    """Candidate segment with its virality score attached."""
    segment: CandidateSegment
    virality_score: float

    @property
    def text(self) -> str:
        return self.segment.text

    @property
    def start_time(self) -> float:
        return self.segment.start_time

    @property
    def end_time(self) -> float:
        return self.segment.end_time

    @property
    def duration(self) -> float:
        return self.segment.duration
