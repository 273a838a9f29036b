"""Title, caption and hashtag generation for scored segments."""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .segments import ScoredSegment

logger = logging.getLogger(__name__)

MAX_HASHTAGS = 7

# (substrings, title) - first match wins
KEYWORD_TITLES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("three", "3"), "3 Mind-Blowing AI Facts That Will Shock You"),
    (("future",), "The Future of AI Will Blow Your Mind"),
    (("breakthrough",), "AI Breakthrough That Changes Everything"),
    (("job",), "How AI Will Transform Your Job Forever"),
)

FALLBACK_TITLES: Tuple[str, ...] = (
    "This AI Fact Will Blow Your Mind",
    "The Truth About AI Nobody Talks About",
    "3 AI Secrets That Will Change Everything",
    "Why AI is More Dangerous Than You Think",
    "The AI Revolution is Happening NOW",
    "This Changes Everything About Technology",
    "AI Facts That Will Shock You",
    "The Future of AI is Terrifying",
    "Mind-Blowing AI Breakthrough Revealed",
    "This AI Discovery Changes Everything",
)

CAPTION_HOOKS: Tuple[str, ...] = (
    "🤯 This will completely change your perspective!",
    "⚡ You won't believe what's happening right now!",
    "🚀 The future is here and it's incredible!",
    "😱 This is happening faster than you think!",
    "🔥 Everyone needs to know about this!",
    "💡 This insight will blow your mind!",
    "⭐ The most important thing you'll learn today!",
    "🌟 This changes everything we know!",
)

CAPTION_CTAS: Tuple[str, ...] = (
    "What do you think about this? 👇",
    "Share your thoughts in the comments!",
    "Which fact surprised you the most?",
    "Are you ready for this change?",
    "Let me know what you think!",
    "Drop a 🤯 if this shocked you!",
    "Tag someone who needs to see this!",
    "What's your prediction for the future?",
)

BASE_HASHTAGS: Tuple[str, ...] = ("#AI", "#Technology", "#Future", "#Innovation")

# (substrings, tags) - every matching category contributes its tags
CONTEXT_HASHTAGS: Tuple[Tuple[Tuple[str, ...], Tuple[str, str]], ...] = (
    (("art", "creative"), ("#AIArt", "#Creativity")),
    (("job", "work"), ("#FutureOfWork", "#Jobs")),
    (("breakthrough", "discovery"), ("#Breakthrough", "#Discovery")),
    (("mind", "blow"), ("#MindBlown", "#Shocking")),
    (("society", "impact"), ("#Society", "#Impact")),
)

TRENDING_HASHTAGS: Tuple[str, ...] = ("#TechNews", "#Viral", "#MustWatch", "#Trending")


@dataclass
class ClipMetadata:
    """Generated display metadata for one clip."""
    title: str
    caption: str
    hashtags: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "caption": self.caption,
            "hashtags": list(self.hashtags),
        }


def generate_title(text: str, rng: Optional[random.Random] = None) -> str:
    """Pick a canned title by keyword, falling back to a random generic one."""
    lower_text = text.lower()
    for keywords, title in KEYWORD_TITLES:
        if any(keyword in lower_text for keyword in keywords):
            return title

    rng = rng or random.Random()
    return rng.choice(FALLBACK_TITLES)


def generate_caption(rng: Optional[random.Random] = None) -> str:
    """Combine a random hook with a random call to action."""
    rng = rng or random.Random()
    hook = rng.choice(CAPTION_HOOKS)
    cta = rng.choice(CAPTION_CTAS)
    return f"{hook} {cta}"


def generate_hashtags(text: str) -> List[str]:
    """
    Build the hashtag list for a segment.

    Order is base tags, then context tags, then trending tags; the list is
    cut to MAX_HASHTAGS so base tags always survive.
    """
    lower_text = text.lower()

    context_tags = []
    for keywords, tags in CONTEXT_HASHTAGS:
        if any(keyword in lower_text for keyword in keywords):
            context_tags.extend(tags)

    all_tags = [*BASE_HASHTAGS, *context_tags, *TRENDING_HASHTAGS]
    return all_tags[:MAX_HASHTAGS]


def generate_clip_metadata(
    segment: ScoredSegment,
    video_title: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> ClipMetadata:
    """
    Generate title, caption and hashtags for a scored segment.

    Args:
        segment: Segment that passed the virality gate
        video_title: Title of the source video, used for log context
        rng: Random source for the title fallback and caption; a fresh
            unseeded one is used when omitted

    Returns:
        ClipMetadata
    """
    rng = rng or random.Random()

    title = generate_title(segment.text, rng)
    caption = generate_caption(rng)
    hashtags = generate_hashtags(segment.text)

    logger.debug(
        f"Metadata for {video_title or 'video'} segment "
        f"{segment.start_time:.1f}-{segment.end_time:.1f}s: '{title}'"
    )

    return ClipMetadata(title=title, caption=caption, hashtags=hashtags)
