"""
Storelens Configuration Module
==============================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    STORE_DEFAULT_COUNTRY: Two-letter store country (default: us)
    STORE_DEFAULT_LANG: Listing language (default: en)
    STORE_REQUEST_TIMEOUT: HTTP timeout in seconds (default: 30)
    STORE_USER_AGENT: User-Agent sent to the iTunes endpoints
    STORE_MAX_REVIEW_PAGES: App Store review feed pages to read (default: 10)

    CACHE_TTL_SECONDS: Fetch memoization TTL (default: 600)
    CACHE_MAX_ENTRIES: In-memory cache size cap (default: 1000)
    CACHE_USE_REDIS: Try Redis before the in-memory cache (default: false)
    CACHE_PREFIX: Redis key prefix (default: storelens)
    REDIS_URL: Full Redis URL (optional)

    ANALYTICS_KEYWORD_TOP_N: Keyword table size (default: 30)
    ANALYTICS_VERSION_KEYWORD_TOP_N: Per-version keyword table size (default: 10)
    ANALYTICS_RECENT_WINDOW: Reviews in the trend window (default: 20)
    ANALYTICS_SENTIMENT_SCALE: five_level | three_level (default: five_level)

    LOG_LEVEL, LOG_FILE, LOG_JSON
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class StoreConfig:
    """Upstream store access configuration."""

    default_country: str = field(default_factory=lambda: get_env("STORE_DEFAULT_COUNTRY", "us"))
    default_lang: str = field(default_factory=lambda: get_env("STORE_DEFAULT_LANG", "en"))
    request_timeout: int = field(default_factory=lambda: get_env_int("STORE_REQUEST_TIMEOUT", 30))
    user_agent: str = field(default_factory=lambda: get_env("STORE_USER_AGENT", "storelens/1.0"))

    # Apple's review feed serves 50 reviews per page, 10 pages at most
    max_review_pages: int = field(default_factory=lambda: get_env_int("STORE_MAX_REVIEW_PAGES", 10))

    def __post_init__(self):
        if len(self.default_country) != 2:
            raise ValueError("default_country must be a two-letter code")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if not 1 <= self.max_review_pages <= 10:
            raise ValueError("max_review_pages must be between 1 and 10")


@dataclass
class CacheConfig:
    """Fetch memoization configuration."""

    ttl_seconds: int = field(default_factory=lambda: get_env_int("CACHE_TTL_SECONDS", 600))
    max_entries: int = field(default_factory=lambda: get_env_int("CACHE_MAX_ENTRIES", 1000))
    use_redis: bool = field(default_factory=lambda: get_env_bool("CACHE_USE_REDIS", False))
    prefix: str = field(default_factory=lambda: get_env("CACHE_PREFIX", "storelens"))
    redis_url: Optional[str] = field(default_factory=lambda: get_env("REDIS_URL"))

    def __post_init__(self):
        if self.ttl_seconds < 0:
            raise ValueError("ttl_seconds cannot be negative")
        if self.max_entries <= 0:
            raise ValueError("max_entries must be positive")


@dataclass
class AnalyticsConfig:
    """Analytics engine parameters."""

    keyword_top_n: int = field(default_factory=lambda: get_env_int("ANALYTICS_KEYWORD_TOP_N", 30))
    version_keyword_top_n: int = field(default_factory=lambda: get_env_int("ANALYTICS_VERSION_KEYWORD_TOP_N", 10))
    recent_window: int = field(default_factory=lambda: get_env_int("ANALYTICS_RECENT_WINDOW", 20))
    sentiment_scale: str = field(default_factory=lambda: get_env("ANALYTICS_SENTIMENT_SCALE", "five_level"))

    def __post_init__(self):
        if self.sentiment_scale not in ("five_level", "three_level"):
            raise ValueError("sentiment_scale must be 'five_level' or 'three_level'")
        if self.keyword_top_n <= 0 or self.version_keyword_top_n <= 0:
            raise ValueError("keyword table sizes must be positive")
        if self.recent_window <= 0:
            raise ValueError("recent_window must be positive")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class Settings:
    """Main application settings container."""

    store: StoreConfig = field(default_factory=StoreConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    app_name: str = "storelens"
    app_version: str = "1.0.0"
    environment: str = field(default_factory=lambda: get_env("ENVIRONMENT", "development"))

    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings(force_reload: bool = False) -> Settings:
    """
    Get the global settings instance (singleton pattern).

    Raises:
        ValueError: If configuration is invalid
    """
    global _settings
    if _settings is None or force_reload:
        _settings = Settings()
    return _settings
