"""
Storelens API Models
====================

Pydantic models for tool parameters and API responses.
Parameter names follow the camelCase tool contract; snake_case aliases
are accepted too.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional


PlatformName = Literal["ios", "android"]
SortMode = Literal["newest", "relevance", "rating", "helpful"]
SentimentScaleName = Literal["five_level", "three_level"]


class ToolParams(BaseModel):
    """Common fields: every tool targets one store in one country."""
    platform: PlatformName
    country: str = Field("us", min_length=2, max_length=2, description="Two-letter country code")

    @field_validator("country")
    @classmethod
    def lowercase_country(cls, value: str) -> str:
        return value.lower()

    class Config:
        populate_by_name = True
        extra = "forbid"


class SearchAppParams(ToolParams):
    """search_app"""
    term: str = Field(..., min_length=1, description="The search term to look up")
    num: int = Field(10, ge=1, le=250, description="Number of results to return")


class AppDetailParams(ToolParams):
    """get_app_details"""
    appId: str = Field(..., alias="app_id", min_length=1, description="Package name, numeric id or bundle id")
    lang: str = Field("en", description="Language code for the results")


class KeywordParams(ToolParams):
    """analyze_top_keywords / analyze_keyword_volume"""
    keyword: str = Field(..., min_length=1, description="The keyword to analyze")
    num: int = Field(10, ge=1, le=50, description="Number of apps to analyze")


class ReviewAnalysisParams(ToolParams):
    """analyze_reviews"""
    appId: str = Field(..., alias="app_id", min_length=1)
    lang: str = "en"
    sort: SortMode = "newest"
    num: int = Field(100, ge=1, le=1000, description="Number of reviews to analyze")
    sentimentScale: Optional[SentimentScaleName] = Field(None, alias="sentiment_scale")


class PricingParams(AppDetailParams):
    """get_pricing_details"""
    pass


class DeveloperParams(ToolParams):
    """get_developer_info"""
    developerId: str = Field(..., alias="developer_id", min_length=1, description="Developer id or name")
    num: int = Field(50, ge=1, le=250, description="Maximum number of apps to include")


class VersionHistoryParams(AppDetailParams):
    """get_version_history"""
    pass


# ============================================================================
# RESPONSES
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    cache: dict
    tools: int


class ToolInfo(BaseModel):
    """One entry of the tool listing."""
    name: str
    description: str
    parameters: dict


class ToolListResponse(BaseModel):
    tools: List[ToolInfo]
    count: int
