"""Link checker built on top of the crawl engine."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import unquote

from .access import DefaultAccess, create_crawl_handlers
from .config import DEFAULT_INDEX_NAME, DEFAULT_TIMEOUT, CheckLinksOptions
from .crawler import Crawler, EntryPoints
from .identity import canonicalize, get_fragment
from .resource import CrawlHandlers, Link, ResourceInfo

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BrokenLink:
    """A link whose target is missing or lacks the referenced anchor."""

    source: str  # resource key of the linking resource
    target: str  # absolute target URL (fragment kept)
    href: str  # reference text as written in the source


@dataclass
class CheckLinksResult:
    """Result of a link check."""

    broken_links: List[BrokenLink] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


def _has_anchor(target: ResourceInfo, fragment: str) -> bool:
    if target.ids is None:
        return False
    return fragment in target.ids or unquote(fragment) in target.ids


def _is_broken(
    link: Link, resources: Dict[str, ResourceInfo], check_fragments: bool
) -> bool:
    target = resources.get(canonicalize(link.url))
    if target is None:
        # Never discovered (e.g. external and unchecked): nothing to report
        return False
    if not target.content_type:
        return True

    fragment = get_fragment(link.url)
    if check_fragments and fragment:
        return not _has_anchor(target, fragment)
    return False


def find_broken_links(
    resources: Dict[str, ResourceInfo], *, check_fragments: bool = False
) -> List[BrokenLink]:
    """Walk a crawl's resources and list broken links in discovery order."""
    broken: List[BrokenLink] = []
    for source, info in resources.items():
        for link in info.links or []:
            if _is_broken(link, resources, check_fragments):
                broken.append(BrokenLink(source=source, target=link.url, href=link.href))
    return broken


class LinkChecker:
    """Reports broken links reachable from one or more entry points."""

    def __init__(self, handlers: CrawlHandlers):
        self.crawler = Crawler(handlers)

    async def check_links_async(
        self,
        entry_points: EntryPoints,
        options: Optional[CheckLinksOptions] = None,
    ) -> CheckLinksResult:
        options = options or CheckLinksOptions()
        crawl_result = await self.crawler.crawl_async(
            entry_points, options.to_crawl_options()
        )

        broken_links = find_broken_links(
            crawl_result.resources, check_fragments=options.check_fragments
        )
        LOGGER.debug(
            "Checked %d resources, %d broken links",
            len(crawl_result.resources),
            len(broken_links),
        )
        return CheckLinksResult(broken_links=broken_links, errors=crawl_result.errors)


async def check_links_async(
    entry_points: EntryPoints,
    options: Optional[CheckLinksOptions] = None,
    *,
    index_name: str = DEFAULT_INDEX_NAME,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
) -> CheckLinksResult:
    """
    Check the links of a local or remote site using the default access layer.

    Args:
        entry_points: URL(s) to start from (``file:`` or ``http(s):``).
        options: Check options (defaults to ``CheckLinksOptions()``).
        index_name: File served for ``file:`` directory URLs.
        timeout: HTTP timeout in seconds.
        user_agent: Optional User-Agent header for HTTP requests.

    Returns:
        CheckLinksResult listing broken links and per-resource errors.
    """
    async with DefaultAccess(
        index_name=index_name, timeout=timeout, user_agent=user_agent
    ) as access:
        checker = LinkChecker(create_crawl_handlers(access))
        return await checker.check_links_async(entry_points, options)


def check_links(
    entry_points: EntryPoints,
    options: Optional[CheckLinksOptions] = None,
    *,
    index_name: str = DEFAULT_INDEX_NAME,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
) -> CheckLinksResult:
    """Synchronous wrapper for check_links_async."""
    return asyncio.run(
        check_links_async(
            entry_points,
            options,
            index_name=index_name,
            timeout=timeout,
            user_agent=user_agent,
        )
    )
