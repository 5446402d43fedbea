"""
Store fetch errors.

Raised by the store clients and the StoreFetcher facade. The upstream
message is kept verbatim and tagged with the request context.
"""

from typing import Optional


class StoreFetchError(Exception):
    """Base exception for upstream store failures (transport, parsing, throttling)."""

    def __init__(self, message: str, platform: Optional[str] = None, app_id: Optional[str] = None):
        self.message = message
        self.platform = platform
        self.app_id = app_id
        super().__init__(self.message)

    def context(self) -> dict:
        data = {"platform": self.platform}
        if self.app_id:
            data["appId"] = self.app_id
        return data


class StoreNotFoundError(StoreFetchError):
    """Requested app or developer does not exist in the store."""
    pass
