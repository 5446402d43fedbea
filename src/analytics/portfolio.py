"""
Developer Portfolio & Version History
=====================================

Aggregations over one developer's catalogue and one app's release data.
"""

from collections import Counter
from typing import Optional, Sequence

from .models import (
    CanonicalAppDetail,
    CanonicalAppSummary,
    DeveloperPortfolio,
    Platform,
    VersionEntry,
    VersionHistory,
)


def developer_portfolio(
    developer_id: str,
    platform: Platform,
    apps: Sequence[CanonicalAppSummary],
    developer_name: Optional[str] = None,
) -> DeveloperPortfolio:
    """
    Summarize a developer's apps.

    Unlike the keyword report, averageRating only counts rated apps: an
    unreleased or unrated title should not drag a portfolio down.
    Apps are listed best-rated first.
    """
    apps = list(apps)
    rated = [app.score for app in apps if app.score]
    installs = sum(getattr(app, "installs", 0) for app in apps)
    categories = Counter(app.category for app in apps if app.category)
    free = sum(1 for app in apps if app.free)

    name = developer_name
    if name is None:
        name = apps[0].developer if apps else ""

    return DeveloperPortfolio(
        developer_id=developer_id,
        developer=name,
        platform=Platform(platform),
        apps=sorted(apps, key=lambda app: app.score or 0, reverse=True),
        app_count=len(apps),
        average_rating=round(sum(rated) / len(rated), 2) if rated else 0.0,
        total_installs=installs,
        category_distribution=dict(categories.most_common()),
        free_apps=free,
        paid_apps=len(apps) - free,
    )


def version_history(detail: CanonicalAppDetail) -> VersionHistory:
    """
    Release history for an app.

    Neither store exposes past releases through its public listing, so
    the history holds the current version only (or nothing when the store
    reports no version).
    """
    versions = []
    if detail.version:
        versions.append(VersionEntry(
            version=detail.version,
            release_date=detail.updated,
            release_notes=detail.release_notes,
        ))

    return VersionHistory(
        app_id=detail.id,
        title=detail.title,
        platform=detail.platform,
        versions=versions,
        current_version_only=True,
    )
