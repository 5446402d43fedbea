"""
Storelens Stores Module
=======================

Upstream access to Google Play and the Apple App Store.

This module provides:
    - PlayStoreClient: google-play-scraper wrapper
    - AppStoreClient: iTunes Search/Lookup API and review feed client
    - StoreFetcher: platform router with read-through caching
    - Settings: environment-driven configuration

Quick Start:
    from src.stores import StoreFetcher

    fetcher = StoreFetcher.from_settings()
    raw = fetcher.search("podcast", "android", limit=5)
"""

from .config import Settings, get_settings
from .errors import StoreFetchError, StoreNotFoundError
from .play_store_client import PlayStoreClient
from .app_store_client import AppStoreClient
from .fetcher import StoreFetcher

__all__ = [
    "Settings",
    "get_settings",
    "StoreFetchError",
    "StoreNotFoundError",
    "PlayStoreClient",
    "AppStoreClient",
    "StoreFetcher",
]
