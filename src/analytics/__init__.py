"""
Storelens Analytics Engine
==========================

Deterministic analysis of app-store data. Pure functions over in-memory
canonical records: no network, no cache, no shared state.

Modules:
    models          - canonical records and report types
    normalization   - Google Play / App Store records -> canonical records
    text            - tokenizer, stop words, keyword/bigram ranker
    sentiment       - five-level lexicon and three-level rating scales
    review_analysis - batch review reducer (ReviewAnalyzer)
    competition     - brand-dominance and install-volume keyword models
    pricing         - monetization classifier and description price scraping
    portfolio       - developer portfolio and version history
"""

from .models import (
    CanonicalAppDetail,
    CanonicalAppSummary,
    CanonicalReview,
    KeywordFrequencyTable,
    NormalizationError,
    Platform,
    PricingRecord,
    RatingSentimentLabel,
    ReviewAnalysisReport,
    SentimentLabel,
    Trend,
)
from .normalization import (
    normalize_app_detail,
    normalize_app_summary,
    normalize_batch,
    normalize_review,
)
from .text import extract_keywords, tokenize
from .sentiment import SentimentScale, classify, classify_rating
from .review_analysis import ReviewAnalyzer
from .competition import brand_competition_analysis, install_volume_competition_analysis
from .pricing import build_pricing_record, classify_monetization
from .portfolio import developer_portfolio, version_history
