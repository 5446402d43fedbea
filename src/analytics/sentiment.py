"""
Review Sentiment Classifier (Heuristic)
=======================================

Two independent sentiment scales are supported:

    five_level  - lexicon counts over review text:
                  positive / somewhat_positive / neutral /
                  somewhat_negative / negative
    three_level - star rating only: Positive (4-5) / Neutral (3) / Negative (1-2)

The two scales are not interchangeable and are never mixed in one report.
Callers pick one through SentimentScale.

No negation handling and no context window: "not good" counts as positive.
"""

import re
from enum import Enum
from typing import Callable, Dict, FrozenSet, Tuple

from .models import CanonicalReview, RatingSentimentLabel, SentimentLabel

# =============================================================================
# LEXICON
# =============================================================================

POSITIVE_WORDS: FrozenSet[str] = frozenset({
    "love", "great", "awesome", "excellent", "amazing", "good", "best",
    "fantastic", "perfect", "nice", "wonderful", "helpful", "easy", "useful",
    "recommend", "enjoy", "fun", "beautiful", "smooth", "fast", "reliable",
    "intuitive", "happy", "brilliant", "favorite",
})

NEGATIVE_WORDS: FrozenSet[str] = frozenset({
    "bad", "terrible", "awful", "worst", "hate", "crash", "crashes", "bug",
    "bugs", "buggy", "slow", "broken", "useless", "annoying", "poor",
    "horrible", "freeze", "freezes", "waste", "disappointed", "problem",
    "issue", "error", "fails", "glitch",
})

_WORD_RE = re.compile(r"[a-z]+(?:'[a-z]+)?")


class SentimentScale(str, Enum):
    FIVE_LEVEL = "five_level"
    THREE_LEVEL = "three_level"


def count_lexicon_hits(text: str) -> Tuple[int, int]:
    """Return (positive_count, negative_count) of whole-word lexicon occurrences."""
    if not text:
        return 0, 0
    positive = negative = 0
    for word in _WORD_RE.findall(text.lower()):
        if word in POSITIVE_WORDS:
            positive += 1
        elif word in NEGATIVE_WORDS:
            negative += 1
    return positive, negative


def classify(text: str) -> SentimentLabel:
    """
    Five-level lexicon classification.

    First matching rule wins:
        positive          pos > 2 * neg
        negative          neg > 2 * pos
        somewhat_positive pos > neg
        somewhat_negative neg > pos
        neutral           otherwise (including no hits)
    """
    positive, negative = count_lexicon_hits(text)

    if positive > 2 * negative:
        return SentimentLabel.POSITIVE
    if negative > 2 * positive:
        return SentimentLabel.NEGATIVE
    if positive > negative:
        return SentimentLabel.SOMEWHAT_POSITIVE
    if negative > positive:
        return SentimentLabel.SOMEWHAT_NEGATIVE
    return SentimentLabel.NEUTRAL


def classify_rating(score: int) -> RatingSentimentLabel:
    """Three-level classification from the star rating."""
    if score >= 4:
        return RatingSentimentLabel.POSITIVE
    if score <= 2:
        return RatingSentimentLabel.NEGATIVE
    return RatingSentimentLabel.NEUTRAL


# Each strategy maps a review to a label value and lists the bucket order.
_STRATEGIES: Dict[SentimentScale, Tuple[Callable[[CanonicalReview], str], Tuple[str, ...]]] = {
    SentimentScale.FIVE_LEVEL: (
        lambda review: classify(review.text).value,
        tuple(label.value for label in SentimentLabel),
    ),
    SentimentScale.THREE_LEVEL: (
        lambda review: classify_rating(review.score).value,
        tuple(label.value for label in RatingSentimentLabel),
    ),
}


def get_sentiment_strategy(
    scale: SentimentScale,
) -> Tuple[Callable[[CanonicalReview], str], Tuple[str, ...]]:
    """Return (labeller, bucket_names) for a scale."""
    return _STRATEGIES[SentimentScale(scale)]
