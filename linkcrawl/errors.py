"""Exception types raised by the crawl engine and its collaborators."""

from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for all crawl errors."""


class ConfigurationError(CrawlError):
    """Raised before any work starts when options or entry points are invalid."""


class InternalError(CrawlError):
    """Raised when the engine detects an inconsistency in its own state."""

    def __init__(self, message: str):
        super().__init__(f"Internal error: {message}")


# ---------------------------------------------------------------------------
# Access errors
# ---------------------------------------------------------------------------


class ResourceNotFoundError(CrawlError):
    """Ordinary access failure: the resource is missing or unreadable.

    The engine records the resource as missing and keeps crawling.
    """

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Resource not found: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class AccessDeniedError(CrawlError):
    """Fatal access failure (permissions or environment).

    Aborts the whole crawl instead of being recorded against one resource.
    """

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Access denied: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
