"""
Review Text Tokenizer & Keyword Ranker
======================================

Deterministic keyword extraction over review text:
    1. Lowercase, split on ASCII word characters
    2. Drop tokens of 2 characters or less and stop words
    3. Count unigrams and adjacent bigrams, merge, rank

Usage:
    table = extract_keywords([r.text for r in reviews], top_n=30)
    table.to_dict()  # {"battery drain": 12, "offline": 9, ...}
"""

import re
from collections import Counter
from typing import FrozenSet, Iterable, List, Optional

from .models import KeywordFrequencyTable

WORD_RE = re.compile(r"\w+", re.ASCII)

MIN_TOKEN_LENGTH = 3

# English function words.
BASE_STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "but", "or", "for", "nor", "on", "at", "to", "by",
    "i", "me", "my", "mine", "you", "your", "yours", "he", "him", "his", "she",
    "her", "hers", "it", "its", "we", "us", "our", "ours", "they", "them", "their",
    "theirs", "this", "that", "these", "those", "is", "are", "was", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will", "would",
    "shall", "should", "can", "could", "may", "might", "must", "of", "in", "out",
    "about", "up", "down", "off", "over", "under", "again", "further", "then",
    "once", "here", "there", "when", "where", "why", "how", "all", "any", "both",
    "each", "few", "more", "most", "other", "some", "such", "no", "not",
    "only", "own", "same", "so", "than", "too", "very", "s", "t", "just", "don",
    "now", "with", "from",
})

# Words that appear in nearly every app review and carry no topic.
DOMAIN_STOP_WORDS: FrozenSet[str] = frozenset({
    "app", "get", "use", "make", "really", "good", "bad", "great", "awesome",
    "terrible", "like", "love", "hate", "best", "worst", "nice", "amazing",
})

DEFAULT_STOP_WORDS: FrozenSet[str] = BASE_STOP_WORDS | DOMAIN_STOP_WORDS


def _passes(word: str, stop_words: FrozenSet[str]) -> bool:
    return len(word) >= MIN_TOKEN_LENGTH and word not in stop_words


def split_words(text: Optional[str]) -> List[str]:
    """Lowercase word stream with no filtering."""
    if not text:
        return []
    return WORD_RE.findall(text.lower())


def tokenize(text: Optional[str], stop_words: FrozenSet[str] = DEFAULT_STOP_WORDS) -> List[str]:
    """Return the lowercase tokens of `text` that pass the length and stop-word filter."""
    return [w for w in split_words(text) if _passes(w, stop_words)]


def extract_keywords(
    texts: Iterable[Optional[str]],
    top_n: int = 30,
    stop_words: FrozenSet[str] = DEFAULT_STOP_WORDS,
) -> KeywordFrequencyTable:
    """
    Rank unigrams and bigrams across a collection of texts.

    Texts are joined with a space before splitting, so the word stream is
    continuous. A bigram is counted for two textually adjacent words only
    when both words pass the filter on their own; a stop word between two
    tokens breaks the pair.

    Unigrams are ranked ahead of bigrams with the same count, and within
    each pool the first-seen term wins a tie.
    """
    joined = " ".join(t for t in texts if t)
    words = split_words(joined)

    unigrams: Counter = Counter()
    bigrams: Counter = Counter()

    for word in words:
        if _passes(word, stop_words):
            unigrams[word] += 1

    for left, right in zip(words, words[1:]):
        if _passes(left, stop_words) and _passes(right, stop_words):
            bigrams[f"{left} {right}"] += 1

    # Counter keeps insertion order; sorted() is stable.
    merged = list(unigrams.items()) + list(bigrams.items())
    merged.sort(key=lambda item: item[1], reverse=True)

    return KeywordFrequencyTable(entries=merged[:top_n])
