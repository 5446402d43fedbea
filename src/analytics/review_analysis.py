"""
Review Analyzer
===============

Folds a batch of CanonicalReview into a ReviewAnalysisReport:
rating distribution, sentiment breakdown, keyword table, per-version
feedback, recent trend, rule-based themes and exemplar reviews.

Batch order is the caller's order (usually the store's sort order).
"Recent" means the first `recent_window` reviews of the batch, which is
only chronological when the batch was fetched newest-first.

Usage:
    analyzer = ReviewAnalyzer()
    report = analyzer.analyze(reviews, app=detail)
    report.to_dict()
"""

import logging
from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence

from .models import (
    CanonicalAppDetail,
    CanonicalReview,
    KeywordFrequencyTable,
    RatingSentimentLabel,
    ReviewAnalysisReport,
    Trend,
    VersionFeedback,
)
from .sentiment import SentimentScale, classify_rating, get_sentiment_strategy
from .text import extract_keywords

logger = logging.getLogger(__name__)


# =============================================================================
# THEME VOCABULARIES
# =============================================================================
# A theme fires when any ranked keyword contains one of its fragments.
# Checked in this order; the report keeps the order.

THEME_VOCABULARY: "OrderedDict[str, tuple]" = OrderedDict([
    ("Stability Issues", (
        "bug", "crash", "error", "fix", "glitch", "freez", "broken", "not working",
    )),
    ("Pricing Concerns", (
        "price", "expensive", "cost", "subscription", "pay", "money", "premium", "refund",
    )),
    ("User Experience", (
        "interface", "design", "easy", "difficult", "confusing", "intuitive",
        "layout", "navigat", "usability",
    )),
])

DEFAULT_KEYWORD_TOP_N = 30
DEFAULT_VERSION_KEYWORD_TOP_N = 10
DEFAULT_RECENT_WINDOW = 20


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _percent(count: int, total: int) -> float:
    return round(count / total * 100, 2) if total > 0 else 0.0


def detect_themes(keywords: KeywordFrequencyTable) -> List[str]:
    """Return theme tags triggered by the keyword table, in check order."""
    themes = []
    for theme, fragments in THEME_VOCABULARY.items():
        if any(fragment in term for term in keywords.terms for fragment in fragments):
            themes.append(theme)
    return themes


def _most_helpful(reviews: List[CanonicalReview]) -> Optional[CanonicalReview]:
    """Highest helpful_count; max() keeps the first review on ties."""
    if not reviews:
        return None
    return max(reviews, key=lambda r: r.helpful_count)


class ReviewAnalyzer:
    """
    Stateless review batch reducer.

    Holds only its parameters, so one instance can serve concurrent
    requests. Re-running on the same batch returns an identical report.
    """

    def __init__(
        self,
        keyword_top_n: int = DEFAULT_KEYWORD_TOP_N,
        version_keyword_top_n: int = DEFAULT_VERSION_KEYWORD_TOP_N,
        recent_window: int = DEFAULT_RECENT_WINDOW,
        sentiment_scale: SentimentScale = SentimentScale.FIVE_LEVEL,
    ):
        self.keyword_top_n = keyword_top_n
        self.version_keyword_top_n = version_keyword_top_n
        self.recent_window = recent_window
        self.sentiment_scale = SentimentScale(sentiment_scale)

    def analyze(
        self,
        reviews: Sequence[CanonicalReview],
        app: Optional[CanonicalAppDetail] = None,
    ) -> ReviewAnalysisReport:
        """
        Build the full report for a batch.

        An empty batch yields a zero-valued report (all percentages and
        averages 0, trend Stable) instead of raising.
        """
        reviews = list(reviews)
        total = len(reviews)

        if total == 0:
            logger.info("Empty review batch, returning zero-valued report")

        rating_distribution = self.rating_distribution(reviews)
        sentiment_breakdown = self.sentiment_breakdown(reviews)
        keywords = extract_keywords(
            (r.text for r in reviews), top_n=self.keyword_top_n
        )

        average_score = _mean([r.score for r in reviews])
        recent = reviews[: self.recent_window]
        recent_average = _mean([r.score for r in recent])
        trend = self.trend(recent_average, average_score)

        recent_sentiment = dict(self.sentiment_breakdown(recent))
        recent_sentiment["count"] = len(recent)
        recent_sentiment["averageScore"] = round(recent_average, 2)

        rating_labels = Counter(classify_rating(r.score) for r in reviews)
        overall_sentiment = (
            RatingSentimentLabel.POSITIVE.value
            if rating_labels[RatingSentimentLabel.POSITIVE] > rating_labels[RatingSentimentLabel.NEGATIVE]
            else RatingSentimentLabel.NEGATIVE.value
        )

        total_helpful = sum(r.helpful_count for r in reviews)
        most_helpful = _most_helpful(reviews)
        engagement = {
            "totalThumbsUp": total_helpful,
            "averageThumbsUp": round(total_helpful / total, 2) if total else 0.0,
            "mostHelpfulReview": most_helpful.to_dict() if most_helpful else None,
        }

        responded = sum(1 for r in reviews if r.has_developer_response)

        report = ReviewAnalysisReport(
            total_reviews_analyzed=total,
            sentiment_scale=self.sentiment_scale.value,
            rating_distribution=rating_distribution,
            sentiment_breakdown=sentiment_breakdown,
            recent_sentiment=recent_sentiment,
            trend=trend,
            average_score=round(average_score, 2),
            overall_sentiment=overall_sentiment,
            keyword_frequency=keywords,
            version_feedback=self.version_feedback(reviews),
            common_themes=detect_themes(keywords),
            engagement=engagement,
            developer_response_rate=_percent(responded, total),
            top_positive_review=_most_helpful([r for r in reviews if r.score >= 4]),
            top_negative_review=_most_helpful([r for r in reviews if r.score <= 2]),
            app=self._app_context(app),
        )

        logger.debug(
            f"Analyzed {total} reviews: avg={report.average_score}, "
            f"trend={trend.value}, themes={report.common_themes}"
        )
        return report

    # =========================================================================
    # STEPS
    # =========================================================================

    @staticmethod
    def rating_distribution(reviews: Sequence[CanonicalReview]) -> Dict[int, int]:
        distribution = {star: 0 for star in range(1, 6)}
        for review in reviews:
            if review.score in distribution:
                distribution[review.score] += 1
        return distribution

    def sentiment_breakdown(self, reviews: Sequence[CanonicalReview]) -> Dict[str, float]:
        """Percentage of reviews per label, 2 decimals; all 0 for an empty batch."""
        labeller, buckets = get_sentiment_strategy(self.sentiment_scale)
        counts = Counter(labeller(r) for r in reviews)
        total = len(reviews)
        return {bucket: _percent(counts.get(bucket, 0), total) for bucket in buckets}

    @staticmethod
    def trend(recent_average: float, overall_average: float) -> Trend:
        if recent_average > overall_average:
            return Trend.IMPROVING
        if recent_average < overall_average:
            return Trend.DECLINING
        return Trend.STABLE

    def version_feedback(self, reviews: Sequence[CanonicalReview]) -> Dict[str, VersionFeedback]:
        """Group by version in first-seen order; unversioned reviews are skipped."""
        groups: Dict[str, List[CanonicalReview]] = {}
        for review in reviews:
            if not review.version:
                continue
            groups.setdefault(review.version, []).append(review)

        feedback = {}
        for version, group in groups.items():
            feedback[version] = VersionFeedback(
                version=version,
                count=len(group),
                average_score=round(_mean([r.score for r in group]), 2),
                keywords=self._version_keywords(group),
            )
        return feedback

    def _version_keywords(self, group: Sequence[CanonicalReview]) -> KeywordFrequencyTable:
        """Per-review keyword tables summed in first-seen order; no bigram spans two reviews."""
        totals: Counter = Counter()
        for review in group:
            if not review.text:
                continue
            for term, count in extract_keywords([review.text]):
                totals[term] += count
        merged = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return KeywordFrequencyTable(entries=merged[:self.version_keyword_top_n])

    @staticmethod
    def _app_context(app: Optional[CanonicalAppDetail]) -> Optional[Dict]:
        if app is None:
            return None
        return {
            "appId": app.id,
            "title": app.title,
            "platform": app.platform.value,
            "storeAverageScore": app.score,
            "storeReviewCount": app.reviews_count,
            "ratingHistogram": {str(k): v for k, v in sorted(app.rating_histogram.items())},
        }
