"""
Storelens API Module
====================

Tool registry, tool services and the FastAPI transport.

Usage:
    from src.api import ToolService

    service = ToolService()
    report = service.call("analyze_reviews", {"appId": "com.spotify.music", "platform": "android"})
"""

from .services import TOOLS_REGISTRY, ToolService, UnknownToolError, error_report, list_tools

__all__ = [
    "TOOLS_REGISTRY",
    "ToolService",
    "UnknownToolError",
    "error_report",
    "list_tools",
]
