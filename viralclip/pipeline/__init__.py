# Clip pipeline - transcript to ranked clips
"""
Clip Pipeline: Transcript-Driven Clip Generation

Pipeline stages:
1. Segment building: overlapping windows of up to three transcript lines
2. Virality scoring: keyword heuristics, base 5.0, capped at 10.0
3. Gating: only segments scoring at least 7.0 continue
4. Metadata: title, caption and hashtags per clip
5. Ranking: highest score first, top 5 kept

All stages work on text only (no audio or video access).
"""

from .segments import TranscriptLine, CandidateSegment, ScoredSegment, build_segments
from .scoring import calculate_virality_score, virality_tier
from .metadata import ClipMetadata, generate_clip_metadata
from .clip_processor import ClipCandidate, generate_clips, VIRALITY_GATE, MAX_CLIPS

__all__ = [
    "TranscriptLine",
    "CandidateSegment",
    "ScoredSegment",
    "build_segments",
    "calculate_virality_score",
    "virality_tier",
    "ClipMetadata",
    "generate_clip_metadata",
    "ClipCandidate",
    "generate_clips",
    "VIRALITY_GATE",
    "MAX_CLIPS",
]
