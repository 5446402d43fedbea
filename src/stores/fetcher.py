"""
Store Fetcher
=============

Single entry point for upstream data: routes each call to the right store
client, memoizes it through an injected FetchCache and tags failures with
the request context.

No retries and no rate limiting: a failure is surfaced as-is, as a
StoreFetchError carrying the upstream message.

Usage:
    fetcher = StoreFetcher.from_settings()
    raw_apps = fetcher.search("meditation", "ios", country="us", limit=10)
    raw_detail = fetcher.app_detail("com.spotify.music", "android")
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..cache import FetchCache
from .app_store_client import AppStoreClient
from .config import Settings, get_settings
from .errors import StoreFetchError
from .play_store_client import PlayStoreClient

logger = logging.getLogger(__name__)

PLATFORMS = ("ios", "android")


class StoreFetcher:
    """Platform router with read-through caching."""

    def __init__(
        self,
        play_client: Optional[PlayStoreClient] = None,
        app_store_client: Optional[AppStoreClient] = None,
        cache: Optional[FetchCache] = None,
    ):
        self.play_client = play_client or PlayStoreClient()
        self.app_store_client = app_store_client or AppStoreClient()
        self.cache = cache or FetchCache()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "StoreFetcher":
        settings = settings or get_settings()
        return cls(
            play_client=PlayStoreClient(default_lang=settings.store.default_lang),
            app_store_client=AppStoreClient(
                timeout=settings.store.request_timeout,
                user_agent=settings.store.user_agent,
                max_review_pages=settings.store.max_review_pages,
            ),
            cache=FetchCache(
                ttl_seconds=settings.cache.ttl_seconds,
                max_entries=settings.cache.max_entries,
                redis_url=settings.cache.redis_url,
                use_redis=settings.cache.use_redis,
                prefix=settings.cache.prefix,
            ),
        )

    def _client(self, platform: str):
        if platform == "android":
            return self.play_client
        if platform == "ios":
            return self.app_store_client
        raise StoreFetchError(f"Unknown platform '{platform}'", platform)

    def _call(self, operation: str, platform: str, app_id: Optional[str], fetch: Callable[[], Any], *key_parts) -> Any:
        """Memoize fetch() and wrap any upstream failure with context."""
        key = f"{operation}:{FetchCache.compute_hash(platform, *key_parts)}"
        log_extra = {"platform": platform, "app_id": app_id}
        try:
            return self.cache.get_or_compute(key, fetch)
        except StoreFetchError as e:
            if e.platform is None:
                e.platform = platform
            if e.app_id is None:
                e.app_id = app_id
            logger.warning(f"{operation} failed on {platform}: {e.message}", extra=log_extra)
            raise
        except Exception as e:
            logger.warning(f"{operation} failed on {platform}: {e}", extra=log_extra)
            raise StoreFetchError(str(e), platform, app_id) from e

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def search(self, term: str, platform: str, country: str = "us", limit: int = 10) -> List[Dict[str, Any]]:
        client = self._client(platform)
        return self._call(
            "search", platform, None,
            lambda: client.search(term, country=country, limit=limit),
            term, country, limit,
        )

    def app_detail(self, app_id: str, platform: str, country: str = "us", lang: str = "en") -> Dict[str, Any]:
        client = self._client(platform)
        return self._call(
            "detail", platform, app_id,
            lambda: client.app_detail(app_id, country=country, lang=lang),
            app_id, country, lang,
        )

    def reviews(
        self,
        app_id: str,
        platform: str,
        sort: str = "newest",
        limit: int = 100,
        country: str = "us",
        lang: str = "en",
    ) -> List[Dict[str, Any]]:
        client = self._client(platform)
        return self._call(
            "reviews", platform, app_id,
            lambda: client.reviews(app_id, sort=sort, limit=limit, country=country, lang=lang),
            app_id, sort, limit, country, lang,
        )

    def developer_apps(self, developer_id: str, platform: str, country: str = "us", limit: int = 50) -> List[Dict[str, Any]]:
        client = self._client(platform)
        return self._call(
            "developer", platform, None,
            lambda: client.developer_apps(developer_id, country=country, limit=limit),
            developer_id, country, limit,
        )

    def app_details(self, app_ids: List[str], platform: str, country: str = "us", lang: str = "en") -> List[Dict[str, Any]]:
        """Detail lookups for several apps, in input order. Any failure aborts the batch."""
        return [self.app_detail(app_id, platform, country=country, lang=lang) for app_id in app_ids]
