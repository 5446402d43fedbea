"""
Store Record Normalization
==========================

Maps the two upstream record shapes onto the canonical models. This is
the only module that branches on platform; everything downstream works
on canonical records.

Recognized shapes:
    android - google-play-scraper dicts (appId, genre, minInstalls,
              histogram list, thumbsUpCount, replyContent, ...)
    ios     - iTunes Search/Lookup API results (trackId, trackName,
              artistName, primaryGenreName, averageUserRating, ...),
              app-store-scraper style dicts (id, appId, title,
              primaryGenre, score, ...) and customer-review RSS entries
              whose fields are wrapped in {"label": ...}

Optional fields default silently. A record without its identity field
raises NormalizationError; normalize_batch() skips such records.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .models import (
    CanonicalAppDetail,
    CanonicalAppSummary,
    CanonicalReview,
    NormalizationError,
    Platform,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Rough App Store install estimate: installs per rating
IOS_INSTALLS_PER_RATING = 100

PLAY_DETAILS_URL = "https://play.google.com/store/apps/details?id={app_id}"


# =============================================================================
# FIELD HELPERS
# =============================================================================

def _first(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present, non-None value among keys."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _label(raw: Dict[str, Any], key: str) -> Any:
    """Unwrap RSS-style {"label": value} fields; plain values pass through."""
    value = raw.get(key)
    if isinstance(value, dict):
        return value.get("label")
    return value


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _float(value: Any, default: float = 0.0) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def coerce_star(value: Any) -> int:
    """Round half-up to an integer star and clamp to 1..5."""
    star = math.floor(_float(value) + 0.5)
    return max(1, min(5, star))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept datetimes, epoch seconds/milliseconds, ISO strings and 'Oct 7, 2008'."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 10**11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in ("%b %d, %Y", "%B %d, %Y", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logger.debug(f"Unparseable timestamp: {text!r}")
    return None


def _histogram(value: Any) -> Dict[int, int]:
    """Play returns [n1, ..., n5]; app-store-scraper returns {"1": n1, ...}."""
    histogram = {star: 0 for star in range(1, 6)}
    if isinstance(value, (list, tuple)):
        for star, count in zip(range(1, 6), value):
            histogram[star] = _int(count)
    elif isinstance(value, dict):
        for key, count in value.items():
            star = _int(key, default=-1)
            if star in histogram:
                histogram[star] = _int(count)
    else:
        return {}
    return histogram


def _require(value: Any, what: str, platform: Platform, raw: Dict[str, Any]) -> str:
    text = _str(value).strip()
    if not text:
        raise NormalizationError(f"{platform.value} record has no {what}", platform.value, raw)
    return text


# =============================================================================
# APPS
# =============================================================================

def _ios_app_id(raw: Dict[str, Any]) -> Any:
    # Numeric track id first, bundle id as fallback
    return _first(raw, "trackId", "id", "bundleId", "appId")


def _summary_fields(raw: Dict[str, Any], platform: Platform) -> Dict[str, Any]:
    if platform == Platform.ANDROID:
        app_id = _require(raw.get("appId"), "appId", platform, raw)
        price = _float(raw.get("price"))
        return dict(
            id=app_id,
            title=_str(raw.get("title")),
            developer=_str(raw.get("developer")),
            developer_id=_str(raw.get("developerId")),
            icon=_str(raw.get("icon")),
            score=_float(raw.get("score")),
            price=price,
            currency=_str(_first(raw, "currency", default="USD")),
            free=bool(_first(raw, "free", default=price == 0)),
            category=_str(raw.get("genre")),
            platform=platform,
            url=_str(raw.get("url")) or PLAY_DETAILS_URL.format(app_id=app_id),
        )

    app_id = _require(_ios_app_id(raw), "trackId/id", platform, raw)
    price = _float(raw.get("price"))
    free = raw.get("free")
    return dict(
        id=app_id,
        title=_str(_first(raw, "trackName", "title")),
        developer=_str(_first(raw, "artistName", "sellerName", "developer")),
        developer_id=_str(_first(raw, "artistId", "developerId")),
        icon=_str(_first(raw, "artworkUrl512", "artworkUrl100", "artworkUrl60", "icon")),
        score=_float(_first(raw, "averageUserRating", "score")),
        price=price,
        currency=_str(_first(raw, "currency", default="USD")),
        free=(free is True) if free is not None else price == 0,
        category=_str(_first(raw, "primaryGenreName", "primaryGenre", "genre")),
        platform=platform,
        url=_str(_first(raw, "trackViewUrl", "url")),
    )


def normalize_app_summary(raw: Dict[str, Any], platform: Platform) -> CanonicalAppSummary:
    """Normalize one search/listing result."""
    return CanonicalAppSummary(**_summary_fields(raw, Platform(platform)))


def normalize_app_detail(raw: Dict[str, Any], platform: Platform) -> CanonicalAppDetail:
    """Normalize one detail lookup."""
    platform = Platform(platform)
    fields = _summary_fields(raw, platform)

    if platform == Platform.ANDROID:
        ratings = _int(raw.get("ratings"))
        ad_supported = _first(raw, "adSupported", "containsAds", default=False)
        fields.update(
            description=_str(raw.get("description")),
            ratings_count=ratings,
            reviews_count=_int(raw.get("reviews")),
            rating_histogram=_histogram(raw.get("histogram")),
            version=_str(raw.get("version")),
            release_notes=_str(raw.get("recentChanges")),
            updated=parse_timestamp(raw.get("updated")),
            released=parse_timestamp(raw.get("released")),
            offers_in_app_purchases=bool(raw.get("offersIAP")),
            in_app_product_price=_str(raw.get("inAppProductPrice")),
            ad_supported=bool(ad_supported),
            installs=_int(_first(raw, "minInstalls", "realInstalls")),
            installs_estimated=False,
            bundle_id=fields["id"],
        )
    else:
        ratings = _int(_first(raw, "userRatingCount", "ratings"))
        fields.update(
            description=_str(raw.get("description")),
            ratings_count=ratings,
            reviews_count=_int(_first(raw, "reviews", "userRatingCount")),
            rating_histogram=_histogram(raw.get("histogram")),
            version=_str(raw.get("version")),
            release_notes=_str(raw.get("releaseNotes")),
            updated=parse_timestamp(_first(raw, "currentVersionReleaseDate", "updated")),
            released=parse_timestamp(_first(raw, "releaseDate", "released")),
            offers_in_app_purchases=bool(raw.get("offersIAP", False)),
            in_app_product_price="",
            ad_supported=bool(raw.get("adSupported", False)),
            installs=ratings * IOS_INSTALLS_PER_RATING,
            installs_estimated=True,
            bundle_id=_str(_first(raw, "bundleId", "appId")),
        )

    return CanonicalAppDetail(**fields)


# =============================================================================
# REVIEWS
# =============================================================================

def normalize_review(raw: Dict[str, Any], platform: Platform) -> CanonicalReview:
    """Normalize one review."""
    platform = Platform(platform)

    if platform == Platform.ANDROID:
        review_id = _require(_first(raw, "reviewId", "id"), "reviewId", platform, raw)
        return CanonicalReview(
            id=review_id,
            text=_str(_first(raw, "content", "text")),
            score=coerce_star(raw.get("score")),
            user_name=_str(raw.get("userName")),
            date=parse_timestamp(_first(raw, "at", "date")),
            version=_first(raw, "reviewCreatedVersion", "appVersion", "version") or None,
            helpful_count=_int(_first(raw, "thumbsUpCount", "thumbsUp")),
            has_developer_response=bool(raw.get("replyContent")),
            title=_str(raw.get("title")),
        )

    review_id = _require(_label(raw, "id"), "id", platform, raw)
    author = raw.get("author")
    if isinstance(author, dict):
        user_name = _label(author, "name")
    else:
        user_name = raw.get("userName")
    version = _label(raw, "im:version") or raw.get("version")

    return CanonicalReview(
        id=review_id,
        text=_str(_label(raw, "content") or raw.get("text")),
        score=coerce_star(_label(raw, "im:rating") or raw.get("score")),
        user_name=_str(user_name),
        date=parse_timestamp(_label(raw, "updated")),
        version=_str(version) or None,
        helpful_count=_int(_label(raw, "im:voteSum") or raw.get("thumbsUp")),
        has_developer_response=bool(raw.get("developerResponse")),
        title=_str(_label(raw, "title")),
    )


# =============================================================================
# BATCHES
# =============================================================================

def normalize_batch(
    records: Iterable[Dict[str, Any]],
    platform: Platform,
    normalizer: Callable[[Dict[str, Any], Platform], T],
) -> List[T]:
    """Normalize many records, skipping (and logging) those without identity."""
    normalized = []
    skipped = 0
    for raw in records:
        try:
            normalized.append(normalizer(raw, platform))
        except NormalizationError as e:
            skipped += 1
            logger.warning(f"Skipping record: {e.message}")
    if skipped:
        logger.info(f"Normalized {len(normalized)} {Platform(platform).value} records, skipped {skipped}")
    return normalized
