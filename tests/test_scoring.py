"""Tests for virality scoring."""
import pytest

from viralclip.pipeline.scoring import (
    BASE_SCORE,
    MAX_SCORE,
    VIRAL_KEYWORDS,
    calculate_virality_score,
    virality_tier,
)
from viralclip.services.transcript_service import SAMPLE_TRANSCRIPT


class TestCalculateViralityScore:
    """Tests for the keyword heuristics."""

    def test_empty_text_scores_base(self):
        assert calculate_virality_score("") == BASE_SCORE

    def test_single_viral_keyword(self):
        """One keyword adds exactly 0.5."""
        assert calculate_virality_score("mind-blowing") == 5.5
        assert calculate_virality_score("mind-blowing") > calculate_virality_score("")

    def test_case_insensitive(self):
        assert calculate_virality_score("MIND-BLOWING") == calculate_virality_score("mind-blowing")

    def test_repeated_term_counts_once(self):
        assert calculate_virality_score("shocking shocking shocking") == 5.5

    def test_distinct_keywords_accumulate(self):
        assert calculate_virality_score("shocking secret") == 6.0

    def test_question_word_needs_trailing_space(self):
        assert calculate_virality_score("why") == 5.0
        assert calculate_virality_score("why this") == 5.3

    def test_emotional_word(self):
        assert calculate_virality_score("love") == 5.2

    def test_urgency_word(self):
        assert calculate_virality_score("urgent") == 5.3

    def test_number_bonus_uses_whole_words(self):
        assert calculate_virality_score("ten") == 5.4
        assert calculate_virality_score("10") == 5.4
        assert calculate_virality_score("often") == 5.0

    def test_superlative_bonus(self):
        assert calculate_virality_score("least") == 5.3
        # "best" is both a viral keyword and a superlative
        assert calculate_virality_score("best") == 5.8

    def test_score_is_capped(self):
        text = " ".join(VIRAL_KEYWORDS)
        assert calculate_virality_score(text) == MAX_SCORE

    @pytest.mark.parametrize("text", [*SAMPLE_TRANSCRIPT, "", "what now?", "The BEST 3 secrets"])
    def test_bounded_and_deterministic(self, text):
        first = calculate_virality_score(text)
        assert BASE_SCORE <= first <= MAX_SCORE
        assert calculate_virality_score(text) == first


class TestViralityTier:
    """Tests for review queue labels."""

    @pytest.mark.parametrize("score,label", [
        (10.0, "Viral"),
        (9.0, "Viral"),
        (8.5, "High"),
        (8.0, "High"),
        (7.0, "Good"),
        (6.9, "Low"),
        (5.0, "Low"),
    ])
    def test_tiers(self, score, label):
        assert virality_tier(score) == label
