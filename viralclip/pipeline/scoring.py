"""Heuristic virality scoring for transcript text.

Scores start at a neutral base and only ever gain bonuses, so the result
always lies in [BASE_SCORE, MAX_SCORE]. Each category counts a phrase once
no matter how often it repeats.
"""
import re
from typing import Tuple

BASE_SCORE = 5.0
MAX_SCORE = 10.0

VIRAL_KEYWORDS: Tuple[str, ...] = (
    "mind-blowing", "shocking", "incredible", "amazing", "unbelievable",
    "secret", "hidden", "revealed", "exposed", "truth",
    "you won't believe", "this will change", "nobody talks about",
    "three", "five", "top", "best", "worst", "most",
    "before", "after", "vs", "versus", "compared to",
)
QUESTION_WORDS: Tuple[str, ...] = ("what", "why", "how", "when", "where", "who")
EMOTIONAL_WORDS: Tuple[str, ...] = ("love", "hate", "fear", "excited", "angry", "surprised")
URGENCY_WORDS: Tuple[str, ...] = ("now", "today", "immediately", "urgent", "breaking", "latest")

VIRAL_KEYWORD_BONUS = 0.5
QUESTION_BONUS = 0.3
EMOTIONAL_BONUS = 0.2
URGENCY_BONUS = 0.3
NUMBER_BONUS = 0.4
SUPERLATIVE_BONUS = 0.3

NUMBER_PATTERN = re.compile(r"\b(three|3|five|5|ten|10)\b")
SUPERLATIVE_PATTERN = re.compile(r"\b(best|worst|most|least|biggest|smallest)\b")

# Lower bounds for the review queue labels
VIRALITY_TIERS: Tuple[Tuple[float, str], ...] = (
    (9.0, "Viral"),
    (8.0, "High"),
    (7.0, "Good"),
)


def _count_terms(text: str, terms: Tuple[str, ...], suffix: str = "") -> int:
    return sum(1 for term in terms if term + suffix in text)


def calculate_virality_score(text: str) -> float:
    """
    Score text for viral potential.

    Matching is case-insensitive and substring based. Question words only
    count when followed by a space.

    Args:
        text: Segment text

    Returns:
        Score between 5.0 and 10.0, rounded to two decimals
    """
    lower_text = (text or "").lower()
    score = BASE_SCORE

    score += VIRAL_KEYWORD_BONUS * _count_terms(lower_text, VIRAL_KEYWORDS)
    score += QUESTION_BONUS * _count_terms(lower_text, QUESTION_WORDS, suffix=" ")
    score += EMOTIONAL_BONUS * _count_terms(lower_text, EMOTIONAL_WORDS)
    score += URGENCY_BONUS * _count_terms(lower_text, URGENCY_WORDS)

    if NUMBER_PATTERN.search(lower_text):
        score += NUMBER_BONUS

    if SUPERLATIVE_PATTERN.search(lower_text):
        score += SUPERLATIVE_BONUS

    # Bonuses are tenths; two decimals absorb float drift
    return round(min(score, MAX_SCORE), 2)


def virality_tier(score: float) -> str:
    """Map a score to its review queue label."""
    for threshold, label in VIRALITY_TIERS:
        if score >= threshold:
            return label
    return "Low"
