"""
Google Play Store Client
========================

Thin wrapper around google-play-scraper. Returns the library's raw dicts
untouched; normalization happens in src.analytics.normalization.

Usage:
    client = PlayStoreClient()
    results = client.search("music streaming", country="us", limit=10)
    detail = client.app_detail("com.spotify.music")
    reviews = client.reviews("com.spotify.music", sort="newest", limit=200)
"""

import logging
from typing import Any, Dict, List, Optional

from google_play_scraper import Sort, app as gplay_app, reviews as gplay_reviews, search as gplay_search
from google_play_scraper.exceptions import NotFoundError

from .errors import StoreFetchError, StoreNotFoundError

logger = logging.getLogger(__name__)

PLATFORM = "android"

# Play has no "helpful" ordering; relevance is the closest
SORT_MAPPING = {
    "newest": Sort.NEWEST,
    "relevance": Sort.MOST_RELEVANT,
    "rating": Sort.RATING,
    "helpful": Sort.MOST_RELEVANT,
}

# google-play-scraper pages reviews 200 at a time
REVIEWS_PAGE_SIZE = 200


class PlayStoreClient:
    """Google Play access through google-play-scraper."""

    def __init__(self, default_lang: str = "en"):
        self.default_lang = default_lang
        self._requests_made = 0

    def search(self, term: str, country: str = "us", limit: int = 10, lang: Optional[str] = None) -> List[Dict[str, Any]]:
        """Search apps by term; results in store rank order."""
        self._requests_made += 1
        results = gplay_search(term, lang=lang or self.default_lang, country=country, n_hits=limit)
        logger.debug(f"Play search '{term}' ({country}): {len(results)} results")
        return results[:limit]

    def app_detail(self, app_id: str, country: str = "us", lang: Optional[str] = None) -> Dict[str, Any]:
        """Full listing for one package name."""
        self._requests_made += 1
        try:
            return gplay_app(app_id, lang=lang or self.default_lang, country=country)
        except NotFoundError as e:
            raise StoreNotFoundError(f"App not found: {app_id} ({e})", PLATFORM, app_id)

    def reviews(
        self,
        app_id: str,
        sort: str = "newest",
        limit: int = 100,
        country: str = "us",
        lang: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch up to `limit` reviews, following continuation tokens.

        Order is the store's order for the requested sort.
        """
        if sort not in SORT_MAPPING:
            raise StoreFetchError(f"Unsupported sort '{sort}'", PLATFORM, app_id)

        all_reviews: List[Dict[str, Any]] = []
        continuation_token = None

        while len(all_reviews) < limit:
            self._requests_made += 1
            try:
                result, continuation_token = gplay_reviews(
                    app_id,
                    lang=lang or self.default_lang,
                    country=country,
                    sort=SORT_MAPPING[sort],
                    count=min(REVIEWS_PAGE_SIZE, limit - len(all_reviews)),
                    continuation_token=continuation_token,
                )
            except NotFoundError as e:
                raise StoreNotFoundError(f"App not found: {app_id} ({e})", PLATFORM, app_id)

            if not result:
                break
            all_reviews.extend(result)

            if continuation_token is None or getattr(continuation_token, "token", None) is None:
                break

        logger.debug(f"Play reviews {app_id}: fetched {len(all_reviews)} (sort={sort})")
        return all_reviews[:limit]

    def developer_apps(self, developer_id: str, country: str = "us", limit: int = 50) -> List[Dict[str, Any]]:
        """
        Apps published by a developer.

        google-play-scraper has no developer endpoint, so this searches
        the developer name and keeps exact developer/developerId matches.
        """
        self._requests_made += 1
        results = gplay_search(developer_id, lang=self.default_lang, country=country, n_hits=limit)
        wanted = developer_id.strip().lower()
        matches = [
            r for r in results
            if wanted in (str(r.get("developerId", "")).lower(), str(r.get("developer", "")).lower())
        ]
        if not matches:
            raise StoreNotFoundError(f"No apps found for developer: {developer_id}", PLATFORM)
        return matches[:limit]

    def get_stats(self) -> Dict[str, Any]:
        return {"requests_made": self._requests_made}
