"""Clip processing - segments, scores, captions and ranks a transcript.

This is a single synchronous pass; persistence and posting happen elsewhere.
"""
import logging
import random
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .segments import TranscriptLine, ScoredSegment, build_segments
from .scoring import calculate_virality_score
from .metadata import generate_clip_metadata

logger = logging.getLogger(__name__)

# Global quality bar for generating a clip at all. Independent of the
# per-deployment posting threshold in AutomationSettings.min_virality_score.
VIRALITY_GATE = 7.0

# Clips returned per video
MAX_CLIPS = 5


def new_clip_id() -> str:
    return f"clip_{uuid.uuid4().hex[:16]}"


@dataclass
class ClipCandidate:
    """A ranked clip ready to be stored."""
    id: str
    start_time: float
    end_time: float
    duration: float
    transcript: str
    virality_score: float
    title: str
    caption: str
    hashtags: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "transcript": self.transcript,
            "virality_score": self.virality_score,
            "title": self.title,
            "caption": self.caption,
            "hashtags": list(self.hashtags),
        }


def score_segments(lines: Sequence[TranscriptLine]) -> List[ScoredSegment]:
    """Build candidate segments and score each one."""
    return [
        ScoredSegment(segment=segment, virality_score=calculate_virality_score(segment.text))
        for segment in build_segments(lines)
    ]


def rank_clips(clips: List[ClipCandidate], limit: int = MAX_CLIPS) -> List[ClipCandidate]:
    """Sort by score descending, earliest start first on ties, and cap."""
    ranked = sorted(clips, key=lambda c: (-c.virality_score, c.start_time))
    return ranked[:limit]


def generate_clips(
    lines: Sequence[TranscriptLine],
    video_title: Optional[str] = None,
    rng: Optional[random.Random] = None,
    id_factory: Callable[[], str] = new_clip_id,
) -> List[ClipCandidate]:
    """
    Turn a transcript into the top clip candidates.

    Segments scoring below VIRALITY_GATE are dropped before any metadata is
    generated. An empty transcript yields an empty list.

    Args:
        lines: Ordered transcript lines
        video_title: Display title of the source video
        rng: Random source for title fallback and caption selection
        id_factory: Produces a unique id per clip

    Returns:
        At most MAX_CLIPS candidates, highest score first
    """
    rng = rng or random.Random()

    scored = score_segments(lines)
    passing = [s for s in scored if s.virality_score >= VIRALITY_GATE]

    logger.info(
        f"Scored {len(scored)} segments, {len(passing)} at or above {VIRALITY_GATE}"
    )

    clips = []
    for segment in passing:
        metadata = generate_clip_metadata(segment, video_title, rng)
        clips.append(ClipCandidate(
            id=id_factory(),
            start_time=segment.start_time,
            end_time=segment.end_time,
            duration=segment.duration,
            transcript=segment.text,
            virality_score=segment.virality_score,
            title=metadata.title,
            caption=metadata.caption,
            hashtags=metadata.hashtags,
        ))

    top = rank_clips(clips)
    logger.info(f"Generated {len(top)} clips for {video_title or 'video'}")
    return top
