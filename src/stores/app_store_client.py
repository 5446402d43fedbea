"""
Apple App Store Client
======================

Reads the public iTunes endpoints with requests:
    - Search API   https://itunes.apple.com/search  (entity=software)
    - Lookup API   https://itunes.apple.com/lookup  (id / bundleId / artist id)
    - Reviews RSS  https://itunes.apple.com/{cc}/rss/customerreviews/...

The review feed serves 50 reviews per page and at most 10 pages, sorted
either most-recent or most-helpful.

Returns raw JSON dicts; normalization happens in src.analytics.normalization.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import requests

from .errors import StoreFetchError, StoreNotFoundError

logger = logging.getLogger(__name__)

PLATFORM = "ios"

SEARCH_URL = "https://itunes.apple.com/search"
LOOKUP_URL = "https://itunes.apple.com/lookup"
REVIEWS_URL = "https://itunes.apple.com/{country}/rss/customerreviews/page={page}/id={app_id}/sortby={sort}/json"

REVIEWS_PER_PAGE = 50

# The feed only knows two orders; the rest fall back to most recent
SORT_MAPPING = {
    "newest": "mostrecent",
    "helpful": "mosthelpful",
    "rating": "mostrecent",
    "relevance": "mostrecent",
}

NUMERIC_ID_RE = re.compile(r"^\d+$")


def is_numeric_id(app_id: str) -> bool:
    """Track ids are numeric; anything else is treated as a bundle id."""
    return bool(NUMERIC_ID_RE.match(str(app_id)))


class AppStoreClient:
    """App Store access through the iTunes public APIs."""

    def __init__(
        self,
        timeout: int = 30,
        user_agent: str = "storelens/1.0",
        max_review_pages: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.max_review_pages = max_review_pages
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self._requests_made = 0

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None, app_id: Optional[str] = None) -> Dict[str, Any]:
        self._requests_made += 1
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise StoreFetchError(f"App Store request failed: {e}", PLATFORM, app_id)

        if response.status_code == 404:
            raise StoreNotFoundError(f"App Store returned 404 for {url}", PLATFORM, app_id)
        if response.status_code != 200:
            raise StoreFetchError(
                f"App Store error: {response.status_code} - {response.text[:200]}",
                PLATFORM,
                app_id,
            )

        try:
            return response.json()
        except ValueError as e:
            raise StoreFetchError(f"Invalid JSON from App Store: {e}", PLATFORM, app_id)

    # =========================================================================
    # LISTINGS
    # =========================================================================

    def search(self, term: str, country: str = "us", limit: int = 10) -> List[Dict[str, Any]]:
        """Search apps by term; results in store rank order."""
        data = self._get_json(SEARCH_URL, params={
            "term": term,
            "country": country,
            "entity": "software",
            "limit": limit,
        })
        results = data.get("results", [])
        logger.debug(f"App Store search '{term}' ({country}): {len(results)} results")
        return results[:limit]

    def app_detail(self, app_id: str, country: str = "us", lang: Optional[str] = None) -> Dict[str, Any]:
        """Lookup by numeric track id or bundle id."""
        params: Dict[str, Any] = {"country": country}
        if is_numeric_id(app_id):
            params["id"] = app_id
        else:
            params["bundleId"] = app_id
        if lang:
            params["lang"] = lang

        data = self._get_json(LOOKUP_URL, params=params, app_id=app_id)
        results = [r for r in data.get("results", []) if r.get("wrapperType", "software") == "software"]
        if not results:
            raise StoreNotFoundError(f"App not found: {app_id}", PLATFORM, app_id)
        return results[0]

    def developer_apps(self, developer_id: str, country: str = "us", limit: int = 50) -> List[Dict[str, Any]]:
        """All software published under an artist id."""
        data = self._get_json(LOOKUP_URL, params={
            "id": developer_id,
            "entity": "software",
            "country": country,
            "limit": limit,
        })
        apps = [r for r in data.get("results", []) if r.get("wrapperType") == "software"]
        if not apps:
            raise StoreNotFoundError(f"No apps found for developer: {developer_id}", PLATFORM)
        return apps[:limit]

    # =========================================================================
    # REVIEWS
    # =========================================================================

    def reviews(
        self,
        app_id: str,
        sort: str = "newest",
        limit: int = 100,
        country: str = "us",
        lang: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read review feed pages until `limit` reviews or a short page.

        Bundle ids are resolved to track ids first; the feed only accepts
        numeric ids.
        """
        if sort not in SORT_MAPPING:
            raise StoreFetchError(f"Unsupported sort '{sort}'", PLATFORM, app_id)

        track_id = app_id
        if not is_numeric_id(app_id):
            track_id = str(self.app_detail(app_id, country=country, lang=lang)["trackId"])

        max_pages = min(-(-limit // REVIEWS_PER_PAGE), self.max_review_pages)
        all_reviews: List[Dict[str, Any]] = []

        for page in range(1, max_pages + 1):
            url = REVIEWS_URL.format(
                country=country, page=page, app_id=track_id, sort=SORT_MAPPING[sort]
            )
            data = self._get_json(url, app_id=app_id)
            entries = data.get("feed", {}).get("entry", [])
            if isinstance(entries, dict):
                entries = [entries]

            # The first entry of page 1 can be the app itself, not a review
            page_reviews = [e for e in entries if "im:rating" in e]
            all_reviews.extend(page_reviews)

            if len(page_reviews) < REVIEWS_PER_PAGE or len(all_reviews) >= limit:
                break

        logger.debug(f"App Store reviews {app_id}: fetched {len(all_reviews)} (sort={sort})")
        return all_reviews[:limit]

    def get_stats(self) -> Dict[str, Any]:
        return {"requests_made": self._requests_made}
