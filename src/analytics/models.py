"""
Storelens Analytics Data Models
===============================

Canonical, platform-agnostic records and the reports built from them.
Every object here lives for a single request: built, serialized, dropped.

to_dict() methods emit the camelCase wire format returned by the tools.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Platform(str, Enum):
    """Supported stores."""
    IOS = "ios"
    ANDROID = "android"


class SentimentLabel(str, Enum):
    """Five-level lexicon sentiment."""
    POSITIVE = "positive"
    SOMEWHAT_POSITIVE = "somewhat_positive"
    NEUTRAL = "neutral"
    SOMEWHAT_NEGATIVE = "somewhat_negative"
    NEGATIVE = "negative"


class RatingSentimentLabel(str, Enum):
    """Three-level star-rating sentiment."""
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


class Trend(str, Enum):
    IMPROVING = "Improving"
    DECLINING = "Declining"
    STABLE = "Stable"


class NormalizationError(Exception):
    """Raised when an upstream record lacks its mandatory identity field."""

    def __init__(self, message: str, platform: Optional[str] = None, record: Optional[Dict] = None):
        self.message = message
        self.platform = platform
        self.record = record
        super().__init__(self.message)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# CANONICAL RECORDS
# =============================================================================

@dataclass(frozen=True)
class CanonicalAppSummary:
    """One normalized search/listing result."""
    id: str
    title: str
    developer: str
    developer_id: str
    icon: str
    score: float                # 0-5, 0 when the store has no rating
    price: float
    currency: str
    free: bool
    category: str
    platform: Platform
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "developer": self.developer,
            "developerId": self.developer_id,
            "icon": self.icon,
            "score": self.score,
            "price": self.price,
            "currency": self.currency,
            "free": self.free,
            "category": self.category,
            "platform": self.platform.value,
            "url": self.url,
        }


@dataclass(frozen=True)
class CanonicalAppDetail(CanonicalAppSummary):
    """Full app record for a detail lookup."""
    description: str = ""
    ratings_count: int = 0
    reviews_count: int = 0
    rating_histogram: Dict[int, int] = field(default_factory=dict)
    version: str = ""
    release_notes: str = ""
    updated: Optional[datetime] = None
    released: Optional[datetime] = None
    offers_in_app_purchases: bool = False
    in_app_product_price: str = ""
    ad_supported: bool = False
    installs: int = 0
    installs_estimated: bool = False    # True when derived from ratings count
    bundle_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "description": self.description,
            "ratingsCount": self.ratings_count,
            "reviewsCount": self.reviews_count,
            "ratingHistogram": {str(k): v for k, v in sorted(self.rating_histogram.items())},
            "version": self.version,
            "releaseNotes": self.release_notes,
            "updated": _iso(self.updated),
            "released": _iso(self.released),
            "offersInAppPurchases": self.offers_in_app_purchases,
            "inAppProductPrice": self.in_app_product_price,
            "adSupported": self.ad_supported,
            "installs": self.installs,
            "installsEstimated": self.installs_estimated,
            "bundleId": self.bundle_id,
        })
        return data


@dataclass(frozen=True)
class CanonicalReview:
    """One normalized user review."""
    id: str
    text: str
    score: int                  # integer 1..5
    user_name: str = ""
    date: Optional[datetime] = None
    version: Optional[str] = None
    helpful_count: int = 0
    has_developer_response: bool = False
    title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "score": self.score,
            "userName": self.user_name,
            "date": _iso(self.date),
            "version": self.version,
            "thumbsUp": self.helpful_count,
            "hasDeveloperResponse": self.has_developer_response,
        }


# =============================================================================
# REPORTS
# =============================================================================

@dataclass
class KeywordFrequencyTable:
    """Ranked (term, count) pairs, highest count first."""
    entries: List[Tuple[str, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def terms(self) -> List[str]:
        return [term for term, _ in self.entries]

    def to_dict(self) -> Dict[str, int]:
        return {term: count for term, count in self.entries}


@dataclass
class VersionFeedback:
    """Review statistics for one app version."""
    version: str
    count: int
    average_score: float
    keywords: KeywordFrequencyTable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "averageScore": self.average_score,
            "keywords": self.keywords.to_dict(),
        }


@dataclass
class ReviewAnalysisReport:
    """Full review analysis for one batch."""
    total_reviews_analyzed: int
    sentiment_scale: str
    rating_distribution: Dict[int, int]
    sentiment_breakdown: Dict[str, float]
    recent_sentiment: Dict[str, Any]
    trend: Trend
    average_score: float
    overall_sentiment: str
    keyword_frequency: KeywordFrequencyTable
    version_feedback: Dict[str, VersionFeedback]
    common_themes: List[str]
    engagement: Dict[str, Any]
    developer_response_rate: float
    top_positive_review: Optional[CanonicalReview] = None
    top_negative_review: Optional[CanonicalReview] = None
    app: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.app:
            data.update(self.app)
        data.update({
            "totalReviewsAnalyzed": self.total_reviews_analyzed,
            "sentimentScale": self.sentiment_scale,
            "averageScore": self.average_score,
            "overallSentiment": self.overall_sentiment,
            "ratingDistribution": {str(k): v for k, v in sorted(self.rating_distribution.items())},
            "sentimentBreakdown": dict(self.sentiment_breakdown),
            "recentSentiment": dict(self.recent_sentiment),
            "trend": self.trend.value,
            "keywordFrequency": self.keyword_frequency.to_dict(),
            "versionFeedback": {v: fb.to_dict() for v, fb in self.version_feedback.items()},
            "commonThemes": list(self.common_themes),
            "engagement": dict(self.engagement),
            "developerResponseRate": self.developer_response_rate,
            "topPositiveReview": self.top_positive_review.to_dict() if self.top_positive_review else None,
            "topNegativeReview": self.top_negative_review.to_dict() if self.top_negative_review else None,
        })
        return data


@dataclass
class KeywordCompetitionReport:
    """Brand-concentration view of a keyword's search results."""
    keyword: str
    platform: Platform
    top_apps: List[CanonicalAppSummary]
    brand_presence: Dict[str, int]
    brand_dominance: float
    competition_level: str
    category_distribution: Dict[str, int]
    average_rating: float
    paid_apps_percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "platform": self.platform.value,
            "topApps": [app.to_dict() for app in self.top_apps],
            "brandPresence": dict(self.brand_presence),
            "brandDominance": self.brand_dominance,
            "competitionLevel": self.competition_level,
            "categoryDistribution": dict(self.category_distribution),
            "averageRating": self.average_rating,
            "paidAppsPercentage": self.paid_apps_percentage,
        }


@dataclass
class InstallVolumeReport:
    """Install-volume view of a keyword's search results."""
    keyword: str
    platform: Platform
    top_apps: List[Dict[str, Any]]
    total_installs_estimate: int
    competition_level: str
    keyword_difficulty: int
    estimated_popularity: int
    average_rating: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "platform": self.platform.value,
            "topApps": list(self.top_apps),
            "totalInstallsEstimate": self.total_installs_estimate,
            "competitionLevel": self.competition_level,
            "keywordDifficulty": self.keyword_difficulty,
            "estimatedPopularity": self.estimated_popularity,
            "averageRating": self.average_rating,
        }


@dataclass
class PriceItem:
    """One price mention scraped from a description."""
    amount: float
    formatted_price: str
    context: str = ""
    period: Optional[str] = None    # subscriptions only: "month", "year", ...

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "amount": self.amount,
            "formattedPrice": self.formatted_price,
            "context": self.context,
        }
        if self.period:
            data["period"] = self.period
        return data


@dataclass
class PricingRecord:
    """Normalized pricing facts plus the derived monetization model."""
    amount: float
    currency: str
    formatted_price: str
    is_free: bool
    offers_in_app_purchases: bool = False
    in_app_price_range: str = ""
    in_app_items: List[PriceItem] = field(default_factory=list)
    offers_subscriptions: bool = False
    subscription_items: List[PriceItem] = field(default_factory=list)
    ad_supported: bool = False
    monetization_model: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basePrice": {
                "amount": self.amount,
                "currency": self.currency,
                "formattedPrice": self.formatted_price,
                "isFree": self.is_free,
            },
            "inAppPurchases": {
                "offers": self.offers_in_app_purchases,
                "priceRange": self.in_app_price_range,
                "items": [item.to_dict() for item in self.in_app_items],
            },
            "subscriptions": {
                "offers": self.offers_subscriptions,
                "items": [item.to_dict() for item in self.subscription_items],
            },
            "adSupported": self.ad_supported,
            "monetizationModel": self.monetization_model,
        }


@dataclass
class DeveloperPortfolio:
    """Aggregate view over one developer's apps."""
    developer_id: str
    developer: str
    platform: Platform
    apps: List[CanonicalAppSummary]
    app_count: int
    average_rating: float
    total_installs: int
    category_distribution: Dict[str, int]
    free_apps: int
    paid_apps: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "developerId": self.developer_id,
            "developer": self.developer,
            "platform": self.platform.value,
            "appCount": self.app_count,
            "averageRating": self.average_rating,
            "totalInstalls": self.total_installs,
            "categoryDistribution": dict(self.category_distribution),
            "freeApps": self.free_apps,
            "paidApps": self.paid_apps,
            "apps": [app.to_dict() for app in self.apps],
        }


@dataclass
class VersionEntry:
    version: str
    release_date: Optional[datetime]
    release_notes: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "releaseDate": _iso(self.release_date),
            "releaseNotes": self.release_notes,
        }


@dataclass
class VersionHistory:
    app_id: str
    title: str
    platform: Platform
    versions: List[VersionEntry]
    current_version_only: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appId": self.app_id,
            "title": self.title,
            "platform": self.platform.value,
            "versions": [v.to_dict() for v in self.versions],
            "currentVersionOnly": self.current_version_only,
        }
