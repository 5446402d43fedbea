"""
Keyword Competition Analysis
============================

Two distinct models over the apps a keyword search returns. They answer
the same question differently and are kept as separate operations:

    brand_competition_analysis          - how concentrated the results are
                                          among developers (brand dominance)
    install_volume_competition_analysis - how much install volume the
                                          results already capture (log10 bands)

Both accept the ordered search results (upstream rank order) as canonical
records and never mutate them.
"""

import logging
import math
from collections import Counter
from typing import Dict, List, Sequence, Tuple

from .models import (
    CanonicalAppDetail,
    CanonicalAppSummary,
    InstallVolumeReport,
    KeywordCompetitionReport,
    Platform,
)

logger = logging.getLogger(__name__)


# =============================================================================
# BRAND DOMINANCE MODEL
# =============================================================================

COMPETITION_LOW = "Low - Dominated by major brands"
COMPETITION_MEDIUM = "Medium - Some established players"
COMPETITION_HIGH = "High - Fragmented market"

# (exclusive lower bound on dominance, label), checked in order
DOMINANCE_BANDS: List[Tuple[float, str]] = [
    (0.7, COMPETITION_LOW),
    (0.4, COMPETITION_MEDIUM),
]


def competition_level_for_dominance(dominance: float) -> str:
    for threshold, label in DOMINANCE_BANDS:
        if dominance > threshold:
            return label
    return COMPETITION_HIGH


def brand_presence(apps: Sequence[CanonicalAppSummary]) -> Dict[str, int]:
    """Developer -> app count, highest first; ties keep first-seen order."""
    counts = Counter(app.developer for app in apps)
    return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))


def brand_competition_analysis(
    keyword: str,
    platform: Platform,
    apps: Sequence[CanonicalAppSummary],
) -> KeywordCompetitionReport:
    """
    Brand-concentration report for a keyword.

    brandDominance is the share of results owned by the two most frequent
    developers. Missing scores count as 0 and still count toward the
    average's denominator.
    """
    apps = list(apps)
    total = len(apps)
    presence = brand_presence(apps)

    top_two = sum(list(presence.values())[:2])
    dominance = top_two / total if total else 0.0

    categories = Counter(app.category for app in apps if app.category)
    paid = sum(1 for app in apps if not app.free)

    report = KeywordCompetitionReport(
        keyword=keyword,
        platform=Platform(platform),
        top_apps=apps,
        brand_presence=presence,
        brand_dominance=round(dominance, 4),
        competition_level=competition_level_for_dominance(dominance),
        category_distribution=dict(categories.most_common()),
        average_rating=round(sum(app.score or 0 for app in apps) / total, 2) if total else 0.0,
        paid_apps_percentage=round(paid / total * 100, 2) if total else 0.0,
    )

    logger.debug(
        f"Brand analysis '{keyword}' ({platform}): {total} apps, "
        f"dominance={report.brand_dominance}, level={report.competition_level}"
    )
    return report


# =============================================================================
# INSTALL VOLUME MODEL
# =============================================================================

# (exclusive lower bound on total installs, level, difficulty), checked in order
INSTALL_BANDS: List[Tuple[int, str, int]] = [
    (100_000_000, "Very High", 9),
    (10_000_000, "High", 7),
    (1_000_000, "Medium", 5),
    (100_000, "Low", 3),
]
INSTALL_FLOOR: Tuple[str, int] = ("Very Low", 1)


def install_band(total_installs: int) -> Tuple[str, int]:
    """Return (competition_level, keyword_difficulty) for an install total."""
    for threshold, level, difficulty in INSTALL_BANDS:
        if total_installs > threshold:
            return level, difficulty
    return INSTALL_FLOOR


def estimated_popularity(total_installs: int) -> int:
    """round(log10(installs) - 2), clamped to 0..10."""
    if total_installs <= 0:
        return 0
    popularity = math.floor(math.log10(total_installs) - 2 + 0.5)
    return max(0, min(10, popularity))


def install_volume_competition_analysis(
    keyword: str,
    platform: Platform,
    apps: Sequence[CanonicalAppDetail],
) -> InstallVolumeReport:
    """
    Install-volume report for a keyword.

    Uses each detail's `installs`; for App Store records that value is
    already the ratings-based estimate made during normalization.
    """
    apps = list(apps)
    total = len(apps)
    total_installs = sum(app.installs for app in apps)
    level, difficulty = install_band(total_installs)

    top_apps = [
        {
            "appId": app.id,
            "title": app.title,
            "developer": app.developer,
            "score": app.score,
            "installs": app.installs,
            "installsEstimated": app.installs_estimated,
            "ratings": app.ratings_count,
            "category": app.category,
            "free": app.free,
            "price": app.price,
        }
        for app in apps
    ]

    return InstallVolumeReport(
        keyword=keyword,
        platform=Platform(platform),
        top_apps=top_apps,
        total_installs_estimate=total_installs,
        competition_level=level,
        keyword_difficulty=difficulty,
        estimated_popularity=estimated_popularity(total_installs),
        average_rating=round(sum(app.score or 0 for app in apps) / total, 2) if total else 0.0,
    )
