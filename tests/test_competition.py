"""
Tests for the keyword competition models.

- Brand dominance: top-two developer share and its bands
- Install volume: log10 bands, difficulty and popularity

Usage:
    pytest tests/test_competition.py -v
"""

import pytest
from src.analytics.competition import (
    COMPETITION_HIGH,
    COMPETITION_LOW,
    COMPETITION_MEDIUM,
    brand_competition_analysis,
    brand_presence,
    competition_level_for_dominance,
    estimated_popularity,
    install_band,
    install_volume_competition_analysis,
)
from src.analytics.models import CanonicalAppDetail, Platform


# ============================================================================
# TEST DATA
# ============================================================================

def make_app(
    app_id: str,
    developer: str,
    score: float = 4.0,
    free: bool = True,
    category: str = "Health & Fitness",
    installs: int = 0,
    ratings: int = 0,
) -> CanonicalAppDetail:
    """Helper to create a canonical app detail."""
    return CanonicalAppDetail(
        id=app_id,
        title=f"App {app_id}",
        developer=developer,
        developer_id=developer.lower(),
        icon="",
        score=score,
        price=0.0 if free else 2.99,
        currency="USD",
        free=free,
        category=category,
        platform=Platform.ANDROID,
        url="",
        installs=installs,
        ratings_count=ratings,
    )


# ============================================================================
# BRAND DOMINANCE
# ============================================================================

class TestDominanceBands:

    @pytest.mark.parametrize("dominance,label", [
        (1.0, COMPETITION_LOW),
        (0.71, COMPETITION_LOW),
        (0.70, COMPETITION_MEDIUM),
        (0.41, COMPETITION_MEDIUM),
        (0.40, COMPETITION_HIGH),
        (0.0, COMPETITION_HIGH),
    ])
    def test_thresholds_are_exclusive(self, dominance, label):
        assert competition_level_for_dominance(dominance) == label


class TestBrandPresence:

    def test_sorted_by_count_ties_first_seen(self):
        apps = [make_app(str(i), dev) for i, dev in enumerate(["Xeno", "Yolo", "Yolo", "Xeno", "Zeta"])]
        assert list(brand_presence(apps).items()) == [("Xeno", 2), ("Yolo", 2), ("Zeta", 1)]


class TestBrandCompetitionAnalysis:

    def setup_method(self):
        self.apps = [
            make_app("a1", "Calm", score=4.8),
            make_app("a2", "Calm", score=4.6),
            make_app("a3", "Headspace", score=0.0, free=False),
            make_app("a4", "Indie Dev", score=4.6, category="Lifestyle"),
        ]

    def test_dominance_and_level(self):
        report = brand_competition_analysis("meditation", Platform.ANDROID, self.apps)
        assert report.brand_dominance == 0.75
        assert report.competition_level == COMPETITION_LOW

    def test_missing_score_counts_in_average(self):
        report = brand_competition_analysis("meditation", Platform.ANDROID, self.apps)
        assert report.average_rating == 3.5

    def test_paid_percentage(self):
        report = brand_competition_analysis("meditation", Platform.ANDROID, self.apps)
        assert report.paid_apps_percentage == 25.0

    def test_category_distribution(self):
        report = brand_competition_analysis("meditation", Platform.ANDROID, self.apps)
        assert report.category_distribution == {"Health & Fitness": 3, "Lifestyle": 1}

    def test_fragmented_market(self):
        apps = [make_app(str(i), f"Dev {i}") for i in range(10)]
        report = brand_competition_analysis("timer", Platform.IOS, apps)
        assert report.brand_dominance == 0.2
        assert report.competition_level == COMPETITION_HIGH

    def test_top_apps_keep_rank_order(self):
        report = brand_competition_analysis("meditation", Platform.ANDROID, self.apps)
        assert [app["id"] for app in report.to_dict()["topApps"]] == ["a1", "a2", "a3", "a4"]

    def test_empty_results(self):
        report = brand_competition_analysis("nothing", Platform.IOS, [])
        assert report.brand_dominance == 0.0
        assert report.average_rating == 0.0
        assert report.paid_apps_percentage == 0.0
        assert report.competition_level == COMPETITION_HIGH

    def test_wire_format(self):
        data = brand_competition_analysis("meditation", Platform.ANDROID, self.apps).to_dict()
        assert data["platform"] == "android"
        assert data["brandPresence"] == {"Calm": 2, "Headspace": 1, "Indie Dev": 1}
        assert data["competitionLevel"] == "Low - Dominated by major brands"


# ============================================================================
# INSTALL VOLUME
# ============================================================================

class TestInstallBands:

    @pytest.mark.parametrize("installs,expected", [
        (500_000_000, ("Very High", 9)),
        (100_000_001, ("Very High", 9)),
        (100_000_000, ("High", 7)),
        (10_000_001, ("High", 7)),
        (5_000_000, ("Medium", 5)),
        (500_000, ("Low", 3)),
        (100_000, ("Very Low", 1)),
        (0, ("Very Low", 1)),
    ])
    def test_bands(self, installs, expected):
        assert install_band(installs) == expected

    @pytest.mark.parametrize("installs,popularity", [
        (0, 0),
        (50, 0),
        (1_000, 1),
        (1_000_000, 4),
        (3_200_000, 5),
        (10**13, 10),
    ])
    def test_popularity(self, installs, popularity):
        assert estimated_popularity(installs) == popularity


class TestInstallVolumeAnalysis:

    def test_totals_and_levels(self):
        apps = [
            make_app("p1", "Big Co", score=4.5, installs=50_000_000),
            make_app("p2", "Mid Co", score=4.0, installs=10_000_000),
            make_app("p3", "Small Co", score=3.5, installs=1_000_000),
        ]
        report = install_volume_competition_analysis("podcast", Platform.ANDROID, apps)
        assert report.total_installs_estimate == 61_000_000
        assert report.competition_level == "High"
        assert report.keyword_difficulty == 7
        assert report.estimated_popularity == 6
        assert report.average_rating == 4.0

    def test_top_app_rows(self):
        apps = [make_app("p1", "Big Co", installs=1_000, ratings=10)]
        data = install_volume_competition_analysis("podcast", Platform.IOS, apps).to_dict()
        assert data["topApps"][0]["appId"] == "p1"
        assert data["topApps"][0]["installs"] == 1_000
        assert data["topApps"][0]["ratings"] == 10
        assert data["platform"] == "ios"

    def test_empty_results(self):
        report = install_volume_competition_analysis("nothing", Platform.ANDROID, [])
        assert report.total_installs_estimate == 0
        assert report.competition_level == "Very Low"
        assert report.keyword_difficulty == 1
        assert report.estimated_popularity == 0
        assert report.average_rating == 0.0
