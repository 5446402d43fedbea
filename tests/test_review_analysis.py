"""
Tests for the review batch analyzer.

Tests the deterministic review report:
- Rating distribution and average score
- Sentiment breakdown on both scales
- Per-version feedback
- Trend over the recent window
- Theme detection from the keyword table
- Engagement, developer responses and exemplar reviews
- Edge cases: empty batch, idempotence

Usage:
    pytest tests/test_review_analysis.py -v
"""

import pytest
from src.analytics.models import CanonicalAppDetail, CanonicalReview, Platform, Trend
from src.analytics.review_analysis import ReviewAnalyzer, detect_themes
from src.analytics.sentiment import SentimentScale
from src.analytics.text import extract_keywords


# ============================================================================
# TEST DATA
# ============================================================================

def make_review(
    text: str = "opened it once",
    score: int = 3,
    review_id: str = "R_TEST",
    version: str = None,
    helpful: int = 0,
    responded: bool = False,
) -> CanonicalReview:
    """Helper to create a canonical review."""
    return CanonicalReview(
        id=review_id,
        text=text,
        score=score,
        version=version,
        helpful_count=helpful,
        has_developer_response=responded,
    )


def make_app() -> CanonicalAppDetail:
    return CanonicalAppDetail(
        id="com.example.notes",
        title="Example Notes",
        developer="Example Inc",
        developer_id="example",
        icon="",
        score=4.3,
        price=0.0,
        currency="USD",
        free=True,
        category="Productivity",
        platform=Platform.ANDROID,
        url="",
        reviews_count=1200,
        rating_histogram={1: 10, 2: 5, 3: 20, 4: 100, 5: 300},
    )


# ============================================================================
# DISTRIBUTION & AVERAGE
# ============================================================================

class TestDistribution:

    def setup_method(self):
        self.analyzer = ReviewAnalyzer()
        self.reviews = [
            make_review(score=s, review_id=f"R{i}") for i, s in enumerate([5, 5, 4, 2, 1])
        ]

    def test_rating_distribution(self):
        report = self.analyzer.analyze(self.reviews)
        assert report.rating_distribution == {1: 1, 2: 1, 3: 0, 4: 1, 5: 2}

    def test_average_score(self):
        report = self.analyzer.analyze(self.reviews)
        assert report.average_score == pytest.approx(3.4)

    def test_lexicon_free_texts_are_neutral(self):
        report = self.analyzer.analyze(self.reviews)
        assert report.sentiment_breakdown == {
            "positive": 0.0,
            "somewhat_positive": 0.0,
            "neutral": 100.0,
            "somewhat_negative": 0.0,
            "negative": 0.0,
        }

    def test_overall_sentiment_from_ratings(self):
        report = self.analyzer.analyze(self.reviews)
        assert report.overall_sentiment == "Positive"

        negative = [make_review(score=1), make_review(score=2), make_review(score=5)]
        assert self.analyzer.analyze(negative).overall_sentiment == "Negative"

    def test_wire_format(self):
        data = self.analyzer.analyze(self.reviews).to_dict()
        assert data["totalReviewsAnalyzed"] == 5
        assert data["ratingDistribution"] == {"1": 1, "2": 1, "3": 0, "4": 1, "5": 2}
        assert data["sentimentScale"] == "five_level"
        assert data["trend"] == "Stable"


# ============================================================================
# SENTIMENT SCALES
# ============================================================================

class TestSentimentScales:

    def test_five_level_breakdown(self):
        reviews = [
            make_review("love it, fast and smooth", 5),
            make_review("crashes and freezes constantly", 1),
            make_review("fast but buggy", 3),
            make_review("opened it once", 4),
        ]
        breakdown = ReviewAnalyzer().analyze(reviews).sentiment_breakdown
        assert breakdown["positive"] == 25.0
        assert breakdown["negative"] == 25.0
        assert breakdown["neutral"] == 50.0

    def test_three_level_breakdown(self):
        reviews = [make_review(score=s) for s in (5, 4, 3, 1)]
        report = ReviewAnalyzer(sentiment_scale=SentimentScale.THREE_LEVEL).analyze(reviews)
        assert report.sentiment_scale == "three_level"
        assert report.sentiment_breakdown == {"Positive": 50.0, "Neutral": 25.0, "Negative": 25.0}

    def test_percentages_rounded(self):
        reviews = [make_review(score=5), make_review(score=5), make_review(score=1)]
        report = ReviewAnalyzer(sentiment_scale="three_level").analyze(reviews)
        assert report.sentiment_breakdown["Positive"] == 66.67
        assert report.sentiment_breakdown["Negative"] == 33.33


# ============================================================================
# VERSION FEEDBACK
# ============================================================================

class TestVersionFeedback:

    def setup_method(self):
        self.reviews = [
            make_review("sync works offline", 5, "R1", version="1.0"),
            make_review("sync works", 5, "R2", version="1.0"),
            make_review("export missing", 4, "R3", version="1.0"),
            make_review("login loop", 1, "R4", version="2.0"),
            make_review("login fails", 2, "R5", version="2.0"),
            make_review("no version here", 3, "R6"),
        ]

    def test_grouped_by_version(self):
        feedback = ReviewAnalyzer().version_feedback(self.reviews)
        assert list(feedback) == ["1.0", "2.0"]
        assert feedback["1.0"].count == 3
        assert feedback["1.0"].average_score == 4.67
        assert feedback["2.0"].count == 2
        assert feedback["2.0"].average_score == 1.5

    def test_unversioned_reviews_excluded(self):
        feedback = ReviewAnalyzer().version_feedback(self.reviews)
        assert sum(fb.count for fb in feedback.values()) == 5

    def test_version_keywords(self):
        feedback = ReviewAnalyzer().version_feedback(self.reviews)
        assert feedback["2.0"].keywords.terms[0] == "login"
        assert feedback["1.0"].keywords.to_dict()["sync works"] == 2

    def test_version_bigrams_stay_within_one_review(self):
        feedback = ReviewAnalyzer().version_feedback(self.reviews)
        keywords = feedback["1.0"].keywords.to_dict()
        assert "offline export" not in keywords
        assert "works export" not in keywords
        assert keywords["works offline"] == 1
        assert keywords["export missing"] == 1

    def test_version_keyword_limit(self):
        analyzer = ReviewAnalyzer(version_keyword_top_n=2)
        feedback = analyzer.version_feedback(self.reviews)
        assert len(feedback["1.0"].keywords) == 2

    def test_wire_format(self):
        data = ReviewAnalyzer().analyze(self.reviews).to_dict()
        assert data["versionFeedback"]["2.0"]["averageScore"] == 1.5
        assert data["versionFeedback"]["2.0"]["count"] == 2


# ============================================================================
# TREND
# ============================================================================

class TestTrend:

    def test_improving(self):
        reviews = [make_review(score=s) for s in (5, 5, 1, 1)]
        assert ReviewAnalyzer(recent_window=2).analyze(reviews).trend == Trend.IMPROVING

    def test_declining(self):
        reviews = [make_review(score=s) for s in (1, 1, 5, 5)]
        assert ReviewAnalyzer(recent_window=2).analyze(reviews).trend == Trend.DECLINING

    def test_stable_when_window_covers_batch(self):
        reviews = [make_review(score=s) for s in (1, 5, 3)]
        assert ReviewAnalyzer().analyze(reviews).trend == Trend.STABLE

    def test_recent_sentiment_block(self):
        reviews = [make_review(score=s) for s in (5, 5, 1, 1)]
        recent = ReviewAnalyzer(recent_window=2).analyze(reviews).recent_sentiment
        assert recent["count"] == 2
        assert recent["averageScore"] == 5.0

    def test_default_window_is_twenty(self):
        reviews = [make_review(score=5) for _ in range(20)] + [make_review(score=1) for _ in range(20)]
        report = ReviewAnalyzer().analyze(reviews)
        assert report.recent_sentiment["count"] == 20
        assert report.trend == Trend.IMPROVING


# ============================================================================
# THEMES
# ============================================================================

class TestThemes:

    def test_stability_theme(self):
        table = extract_keywords(["keeps crashing after the update"])
        assert detect_themes(table) == ["Stability Issues"]

    def test_themes_in_fixed_order(self):
        table = extract_keywords([
            "confusing layout everywhere",
            "subscription price doubled",
            "constant glitch",
        ])
        assert detect_themes(table) == ["Stability Issues", "Pricing Concerns", "User Experience"]

    def test_no_theme(self):
        assert detect_themes(extract_keywords(["calendar widget"])) == []

    def test_themes_in_report(self):
        reviews = [make_review("refund please, too expensive", 1)]
        assert ReviewAnalyzer().analyze(reviews).common_themes == ["Pricing Concerns"]


# ============================================================================
# ENGAGEMENT & EXEMPLARS
# ============================================================================

class TestEngagement:

    def setup_method(self):
        self.reviews = [
            make_review("solid", 5, "R1", helpful=3),
            make_review("works", 4, "R2", helpful=7),
            make_review("meh", 3, "R3", helpful=9, responded=True),
            make_review("broken", 1, "R4", helpful=7),
            make_review("worse", 2, "R5", helpful=7),
        ]
        self.report = ReviewAnalyzer().analyze(self.reviews)

    def test_thumbs_up_totals(self):
        assert self.report.engagement["totalThumbsUp"] == 33
        assert self.report.engagement["averageThumbsUp"] == 6.6
        assert self.report.engagement["mostHelpfulReview"]["id"] == "R3"

    def test_top_positive_review(self):
        assert self.report.top_positive_review.id == "R2"

    def test_top_negative_review_first_wins_tie(self):
        assert self.report.top_negative_review.id == "R4"

    def test_developer_response_rate(self):
        assert self.report.developer_response_rate == 20.0

    def test_no_exemplar_without_candidates(self):
        report = ReviewAnalyzer().analyze([make_review(score=3)])
        assert report.top_positive_review is None
        assert report.top_negative_review is None
        assert report.to_dict()["topPositiveReview"] is None


# ============================================================================
# EDGE CASES
# ============================================================================

class TestEdgeCases:

    def test_empty_batch_is_zero_valued(self):
        report = ReviewAnalyzer().analyze([])
        assert report.total_reviews_analyzed == 0
        assert report.average_score == 0.0
        assert report.rating_distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
        assert all(value == 0.0 for value in report.sentiment_breakdown.values())
        assert report.trend == Trend.STABLE
        assert len(report.keyword_frequency) == 0
        assert report.version_feedback == {}
        assert report.common_themes == []
        assert report.developer_response_rate == 0.0
        assert report.engagement["averageThumbsUp"] == 0.0
        assert report.engagement["mostHelpfulReview"] is None

    def test_empty_batch_serializes(self):
        data = ReviewAnalyzer().analyze([]).to_dict()
        assert data["recentSentiment"]["count"] == 0
        assert data["keywordFrequency"] == {}

    def test_single_review(self):
        report = ReviewAnalyzer().analyze([make_review("fast sync", 4)])
        assert report.average_score == 4.0
        assert report.trend == Trend.STABLE
        assert report.keyword_frequency.to_dict() == {"fast": 1, "sync": 1, "fast sync": 1}

    def test_idempotent(self):
        reviews = [
            make_review("sync fails offline", 2, "R1", version="3.1", helpful=4),
            make_review("love the new widgets", 5, "R2", version="3.2"),
            make_review("login loop again", 1, "R3", responded=True),
        ]
        analyzer = ReviewAnalyzer()
        assert analyzer.analyze(reviews).to_dict() == analyzer.analyze(reviews).to_dict()

    def test_input_not_mutated(self):
        reviews = [make_review(score=s, review_id=f"R{s}") for s in (1, 5, 3)]
        snapshot = list(reviews)
        ReviewAnalyzer().analyze(reviews)
        assert reviews == snapshot

    def test_app_context(self):
        data = ReviewAnalyzer().analyze([make_review(score=5)], app=make_app()).to_dict()
        assert data["appId"] == "com.example.notes"
        assert data["title"] == "Example Notes"
        assert data["storeReviewCount"] == 1200
        assert data["ratingHistogram"]["5"] == 300
