"""Transcript sources - supply timestamped lines for a video."""
import logging
from typing import List, Optional

from viralclip.pipeline.segments import TranscriptLine

logger = logging.getLogger(__name__)

SAMPLE_LINE_SECONDS = 25.0

SAMPLE_TRANSCRIPT = (
    "Welcome everyone to today's discussion about artificial intelligence and its impact on society.",
    "I want to share three mind-blowing facts about AI that will change how you think about technology.",
    "First, did you know that AI can now create art that's indistinguishable from human work?",
    "This is absolutely revolutionary and it's happening right now as we speak.",
    "Second, machine learning algorithms are already making decisions that affect millions of people daily.",
    "From what you see on social media to loan approvals, AI is everywhere.",
    "Third, the next breakthrough in AI could happen tomorrow, and we might not even realize it.",
    "These developments are happening faster than most people understand.",
    "The implications for jobs, creativity, and human connection are profound.",
    "But here's what really excites me about the future of AI and technology.",
    "We're on the verge of something that could completely transform how we work and live.",
    "The question isn't whether AI will change everything, it's how quickly it will happen.",
)


class TranscriptSource:
    """Produces an ordered transcript for a video."""

    async def fetch(self, video_url: Optional[str]) -> List[TranscriptLine]:
        raise NotImplementedError


class SampleTranscriptSource(TranscriptSource):
    """Returns a fixed demo transcript for any video.

    Stands in for a speech-to-text service; each line spans a fixed
    number of seconds.
    """

    def __init__(self, lines=SAMPLE_TRANSCRIPT, line_seconds: float = SAMPLE_LINE_SECONDS):
        self.lines = tuple(lines)
        self.line_seconds = line_seconds

    async def fetch(self, video_url: Optional[str]) -> List[TranscriptLine]:
        if not video_url:
            raise ValueError("Missing video source")

        logger.info(f"Transcribing {video_url} ({len(self.lines)} sample lines)")
        return [
            TranscriptLine(
                text=text,
                start=i * self.line_seconds,
                end=(i + 1) * self.line_seconds,
            )
            for i, text in enumerate(self.lines)
        ]
