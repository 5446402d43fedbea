"""
Storelens Tool Services
=======================

Business logic behind each tool: fetch -> normalize -> analyze.

Every handler returns a plain dict ready for JSON. Failures never cross
the tool boundary as exceptions: ToolService.call turns them into an
error report that echoes the request parameters.
"""

from typing import Any, Dict, List, Optional, Tuple, Type
from dataclasses import dataclass
import logging
import time

from pydantic import BaseModel

from ..analytics import (
    NormalizationError,
    Platform,
    ReviewAnalyzer,
    brand_competition_analysis,
    build_pricing_record,
    developer_portfolio,
    install_volume_competition_analysis,
    normalize_app_detail,
    normalize_app_summary,
    normalize_batch,
    normalize_review,
    version_history,
)
from ..stores import Settings, StoreFetcher, StoreFetchError, get_settings
from .models import (
    AppDetailParams,
    DeveloperParams,
    KeywordParams,
    PricingParams,
    ReviewAnalysisParams,
    SearchAppParams,
    VersionHistoryParams,
)

logger = logging.getLogger(__name__)


class UnknownToolError(KeyError):
    """Requested tool is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)


def error_report(message: str, **params: Any) -> Dict[str, Any]:
    """Caller-visible failure: message plus the echoed request parameters."""
    report = {"error": message}
    report.update(params)
    report["isError"] = True
    return report


@dataclass
class ToolSpec:
    """Registry entry."""
    name: str
    params_model: Type[BaseModel]
    handler: str
    description: str


class ToolService:
    """
    Runs the registered tools against a StoreFetcher.

    The fetcher carries the cache, so one service instance should be
    shared by all callers of a process.
    """

    def __init__(self, fetcher: Optional[StoreFetcher] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.fetcher = fetcher or StoreFetcher.from_settings(self.settings)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def validate(self, name: str, params: Dict[str, Any]) -> BaseModel:
        """Parse raw parameters. Raises UnknownToolError or pydantic.ValidationError."""
        spec = TOOLS_REGISTRY.get(name)
        if spec is None:
            raise UnknownToolError(name)
        return spec.params_model(**params)

    def call(self, name: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and run a tool; execution failures become error reports."""
        validated = self.validate(name, params)
        return self.execute(name, validated)

    def execute(self, name: str, params: BaseModel) -> Dict[str, Any]:
        handler = getattr(self, TOOLS_REGISTRY[name].handler)
        log_extra = {"tool": name, "platform": getattr(params, "platform", None)}
        started = time.monotonic()
        try:
            result = handler(params)
        except (StoreFetchError, NormalizationError) as e:
            logger.warning(f"Tool {name} failed: {e.message}", extra=log_extra)
            return error_report(e.message, **params.model_dump())
        except Exception as e:
            logger.error(f"Tool {name} failed unexpectedly: {e}", exc_info=True, extra=log_extra)
            return error_report(str(e), **params.model_dump())
        log_extra["duration"] = round(time.monotonic() - started, 3)
        logger.info(f"Tool {name} completed", extra=log_extra)
        return result

    # =========================================================================
    # TOOLS
    # =========================================================================

    def search_app(self, params: SearchAppParams) -> Dict[str, Any]:
        raw = self.fetcher.search(params.term, params.platform, country=params.country, limit=params.num)
        apps = normalize_batch(raw, Platform(params.platform), normalize_app_summary)
        return {
            "query": params.term,
            "platform": params.platform,
            "results": [app.to_dict() for app in apps],
            "count": len(apps),
        }

    def get_app_details(self, params: AppDetailParams) -> Dict[str, Any]:
        detail = self._detail(params.appId, params.platform, params.country, params.lang)
        return {
            "appId": params.appId,
            "platform": params.platform,
            "details": detail.to_dict(),
        }

    def analyze_top_keywords(self, params: KeywordParams) -> Dict[str, Any]:
        apps = self._keyword_details(params)
        return brand_competition_analysis(params.keyword, Platform(params.platform), apps).to_dict()

    def analyze_keyword_volume(self, params: KeywordParams) -> Dict[str, Any]:
        apps = self._keyword_details(params)
        return install_volume_competition_analysis(params.keyword, Platform(params.platform), apps).to_dict()

    def analyze_reviews(self, params: ReviewAnalysisParams) -> Dict[str, Any]:
        platform = Platform(params.platform)
        raw_reviews = self.fetcher.reviews(
            params.appId,
            params.platform,
            sort=params.sort,
            limit=params.num,
            country=params.country,
            lang=params.lang,
        )
        reviews = normalize_batch(raw_reviews, platform, normalize_review)

        # App context is optional; reviews are still analyzed without it
        app = None
        try:
            app = self._detail(params.appId, params.platform, params.country, params.lang)
        except (StoreFetchError, NormalizationError) as e:
            logger.info(f"No app context for {params.appId}: {e.message}")

        analytics = self.settings.analytics
        analyzer = ReviewAnalyzer(
            keyword_top_n=analytics.keyword_top_n,
            version_keyword_top_n=analytics.version_keyword_top_n,
            recent_window=analytics.recent_window,
            sentiment_scale=params.sentimentScale or analytics.sentiment_scale,
        )
        report = analyzer.analyze(reviews, app=app)

        result = {"appId": params.appId, "platform": params.platform}
        result.update(report.to_dict())
        return result

    def get_pricing_details(self, params: PricingParams) -> Dict[str, Any]:
        detail = self._detail(params.appId, params.platform, params.country, params.lang)
        result = {
            "appId": detail.id,
            "title": detail.title,
            "platform": params.platform,
        }
        result.update(build_pricing_record(detail).to_dict())
        return result

    def get_developer_info(self, params: DeveloperParams) -> Dict[str, Any]:
        raw = self.fetcher.developer_apps(
            params.developerId, params.platform, country=params.country, limit=params.num
        )
        apps = normalize_batch(raw, Platform(params.platform), normalize_app_detail)
        return developer_portfolio(params.developerId, Platform(params.platform), apps).to_dict()

    def get_version_history(self, params: VersionHistoryParams) -> Dict[str, Any]:
        detail = self._detail(params.appId, params.platform, params.country, params.lang)
        return version_history(detail).to_dict()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _detail(self, app_id: str, platform: str, country: str, lang: str):
        raw = self.fetcher.app_detail(app_id, platform, country=country, lang=lang)
        return normalize_app_detail(raw, Platform(platform))

    def _keyword_details(self, params: KeywordParams) -> List:
        """
        Detail records for the top search results of a keyword, in rank order.

        Results without an id are skipped. A failed detail lookup fails the
        whole tool: the report must cover the ranks it claims to cover.
        """
        platform = Platform(params.platform)
        raw = self.fetcher.search(params.keyword, params.platform, country=params.country, limit=params.num)
        summaries = normalize_batch(raw, platform, normalize_app_summary)

        raw_details = self.fetcher.app_details(
            [app.id for app in summaries], params.platform, country=params.country
        )
        return normalize_batch(raw_details, platform, normalize_app_detail)


# ============================================================================
# REGISTRY
# ============================================================================

def _spec(name: str, model: Type[BaseModel], description: str) -> Tuple[str, ToolSpec]:
    return name, ToolSpec(name=name, params_model=model, handler=name, description=description)


TOOLS_REGISTRY: Dict[str, ToolSpec] = dict([
    _spec("search_app", SearchAppParams,
          "Search for apps by name and platform"),
    _spec("get_app_details", AppDetailParams,
          "Get detailed information about an app by ID"),
    _spec("analyze_top_keywords", KeywordParams,
          "Analyze top keywords for apps including brand analysis and competition"),
    _spec("analyze_keyword_volume", KeywordParams,
          "Estimate keyword popularity and difficulty from install volume of top apps"),
    _spec("analyze_reviews", ReviewAnalysisParams,
          "Analyze reviews for an app: sentiment, keywords, versions, trend and themes"),
    _spec("get_pricing_details", PricingParams,
          "Get pricing, in-app purchase and subscription details for an app"),
    _spec("get_developer_info", DeveloperParams,
          "Get a developer's app portfolio and aggregate metrics"),
    _spec("get_version_history", VersionHistoryParams,
          "Get release history and notes for an app"),
])


def list_tools() -> List[Dict[str, Any]]:
    """Registry as plain dicts, with each tool's JSON schema."""
    return [
        {
            "name": spec.name,
            "description": spec.description,
            "parameters": spec.params_model.model_json_schema(by_alias=False),
        }
        for spec in TOOLS_REGISTRY.values()
    ]
