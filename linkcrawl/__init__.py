"""Site crawler and link checker for local files and web sites.

This module provides a small API for discovering the resources reachable
from one or more entry points and for reporting broken links. It supports:

- Crawling ``file:`` and ``http(s):`` sites with a depth limit
- Bounded concurrency
- Ignoring, checking or following external links
- Checking that linked fragments (``page.html#section``) exist
- Pluggable resource access and content parsers

Example usage:

    from linkcrawl import check_links, crawl, CheckLinksOptions, CrawlOptions

    # Resource graph of a local site
    result = crawl("file:///srv/site/index.html")
    for url, info in result.resources.items():
        print(url, info.content_type)

    # Broken links, including external ones and fragments
    report = check_links(
        "https://docs.example.com/",
        CheckLinksOptions(check_external_links=True, check_fragments=True,
                          max_concurrency=8),
    )
    for link in report.broken_links:
        print(f"{link.source} -> {link.href}")

    # Custom access layer (e.g. in-memory files for tests)
    from linkcrawl import Crawler, CrawlHandlers
    crawler = Crawler(CrawlHandlers(get_content_type=..., read_text=...))
    result = await crawler.crawl_async("file:///index.html")
"""

from __future__ import annotations

__version__ = "1.0.0"

from .access import DefaultAccess, create_crawl_handlers
from .capture import ContentWriter
from .checker import (
    BrokenLink,
    CheckLinksResult,
    LinkChecker,
    check_links,
    check_links_async,
    find_broken_links,
)
from .config import CheckLinksOptions, CrawlOptions
from .crawler import Crawler, crawl, crawl_async
from .errors import (
    AccessDeniedError,
    ConfigurationError,
    CrawlError,
    InternalError,
    ResourceNotFoundError,
)
from .parsers import DEFAULT_PARSERS, ParseResult, parse_html
from .resource import CrawlHandlers, CrawlResult, Link, ResourceInfo
from .task_queue import TaskQueue, TaskQueueError

__all__ = [
    "__version__",
    # Data types
    "CrawlResult",
    "ResourceInfo",
    "Link",
    "BrokenLink",
    "CheckLinksResult",
    # Options
    "CrawlOptions",
    "CheckLinksOptions",
    # Engine
    "Crawler",
    "CrawlHandlers",
    "crawl",
    "crawl_async",
    # Link checking
    "LinkChecker",
    "check_links",
    "check_links_async",
    "find_broken_links",
    # Collaborators
    "DefaultAccess",
    "create_crawl_handlers",
    "ContentWriter",
    "DEFAULT_PARSERS",
    "ParseResult",
    "parse_html",
    "TaskQueue",
    # Errors
    "CrawlError",
    "ConfigurationError",
    "InternalError",
    "ResourceNotFoundError",
    "AccessDeniedError",
    "TaskQueueError",
]
