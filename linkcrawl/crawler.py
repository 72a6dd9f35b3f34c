"""Crawl engine: discovers resources reachable from one or more entry points."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Set, Union

from .access import DefaultAccess, create_crawl_handlers
from .capture import ContentWriter
from .config import DEFAULT_INDEX_NAME, DEFAULT_TIMEOUT, CrawlOptions
from .errors import AccessDeniedError, ConfigurationError, CrawlError, InternalError
from .identity import (
    canonicalize,
    get_base_from_url,
    is_internal,
    is_retrievable,
    normalize_entry_point,
    resolve,
)
from .parsers import get_parser
from .resource import CrawlHandlers, CrawlResult, Link, ResourceInfo
from .task_queue import TaskQueue

LOGGER = logging.getLogger(__name__)

EntryPoints = Union[str, Sequence[str]]


@dataclass
class _Resource:
    url: str
    depth: int
    internal: bool
    content_type: Optional[str] = None
    links: Optional[List[Link]] = None
    ids: Optional[Set[str]] = None


def _as_list(entry_points: EntryPoints) -> List[str]:
    if isinstance(entry_points, str):
        return [entry_points]
    return list(entry_points)


def resolve_base(entry_points: List[str], base: Optional[str]) -> str:
    """Return the base for a crawl, validating the entry points against it."""
    if base is None:
        bases = {get_base_from_url(url) for url in entry_points}
        if len(bases) > 1:
            raise ConfigurationError(
                "Entry points do not share a common base; specify a base "
                f"explicitly: {', '.join(entry_points)}"
            )
        return bases.pop()

    outside = [url for url in entry_points if not is_internal(url, base)]
    if outside:
        raise ConfigurationError(
            f"Entry points must be under the base {base}: {', '.join(outside)}"
        )
    return base


class _CrawlRun:
    """State of one crawl: the resource table, the error table and the queue.

    All table mutation happens on the event loop between awaits, so no locks
    are needed. The queue and collaborators never see the tables.
    """

    def __init__(self, handlers: CrawlHandlers, options: CrawlOptions, base: str):
        self.handlers = handlers
        self.options = options
        self.base = base
        self.resources: Dict[str, _Resource] = {}
        self.parse_errors: Dict[str, str] = {}
        self.fatal_error: Optional[CrawlError] = None
        self.queue: TaskQueue[str] = TaskQueue(
            self._process, max_concurrency=options.max_concurrency
        )

    def enqueue_if_needed(self, url: str, depth: int) -> None:
        if self.fatal_error is not None:
            return
        key = canonicalize(url)
        internal = is_internal(key, self.base)
        if not (internal or self.options.check_external_links):
            return
        if key in self.resources:
            return

        self.resources[key] = _Resource(url=key, depth=depth, internal=internal)
        self.queue.enqueue(key)

    async def run(self, entry_points: List[str]) -> CrawlResult:
        for url in entry_points:
            self.enqueue_if_needed(url, 0)

        await self.queue.drain()
        if self.fatal_error is not None:
            raise self.fatal_error

        return self._collect()

    def abort(self, exc: CrawlError) -> None:
        if self.fatal_error is None:
            LOGGER.debug("Aborting crawl: %s", exc)
            self.fatal_error = exc
        self.queue.cancel()

    async def _process(self, key: str) -> None:
        try:
            resource = self.resources.get(key)
            if resource is None:
                raise InternalError(f"Attempted to process unknown resource {key}")
            await self._process_resource(resource)
        except (AccessDeniedError, InternalError) as exc:
            self.abort(exc)

    async def _process_resource(self, resource: _Resource) -> None:
        handlers = self.handlers
        options = self.options
        url = resource.url

        try:
            # Ensure the resource exists and check its content type
            try:
                resource.content_type = await handlers.get_content_type(url)
            except AccessDeniedError:
                raise
            except Exception as exc:
                LOGGER.debug("Content type lookup failed for %s: %s", url, exc)
                resource.content_type = None

            parser = get_parser(handlers.content_type_parsers, resource.content_type)
            should_parse = (
                parser is not None
                and (resource.internal or options.follow_external_links)
                and (options.max_depth is None or resource.depth < options.max_depth)
            )
            if not should_parse:
                return

            try:
                content = await handlers.read_text(url)
            except AccessDeniedError:
                raise
            except Exception as exc:
                LOGGER.debug("Reading %s failed: %s", url, exc)
                resource.content_type = None
                return

            if (
                options.content == "save_internal"
                and resource.internal
                and handlers.write_text is not None
            ):
                await handlers.write_text(url, content)

            parsed = parser(content, options.record_anchors)
            if options.record_anchors:
                resource.ids = set(parsed.ids)

            links: List[Link] = []
            resource.links = links
            for href in parsed.hrefs:
                target = resolve(url, href)
                links.append(Link(url=target, href=href))
                if is_retrievable(target):
                    self.enqueue_if_needed(target, resource.depth + 1)

            LOGGER.debug(
                "Parsed %s (depth %d, %d links)", url, resource.depth, len(links)
            )
        except (AccessDeniedError, InternalError):
            raise
        except Exception as exc:
            LOGGER.warning("Failed to process %s: %s", url, exc)
            self.parse_errors[url] = str(exc)

    def _collect(self) -> CrawlResult:
        resources: Dict[str, ResourceInfo] = {}
        for key, resource in self.resources.items():
            info = ResourceInfo(content_type=resource.content_type)
            if resource.links is not None:
                info.links = list(resource.links)
            if resource.ids is not None:
                info.ids = set(resource.ids)
            resources[key] = info

        stats = {
            "total_resources": len(resources),
            "resolved_resources": sum(1 for r in resources.values() if r.content_type),
            "parsed_resources": sum(1 for r in resources.values() if r.links is not None),
            "missing_resources": sum(1 for r in resources.values() if not r.content_type),
            "error_count": len(self.parse_errors),
        }
        return CrawlResult(
            resources=resources, errors=dict(self.parse_errors), stats=stats
        )


class Crawler:
    """Crawl engine bound to a set of access and parser collaborators.

    Example usage:

        crawler = Crawler(handlers)
        result = await crawler.crawl_async(
            "file:///site/index.html",
            CrawlOptions(external_links="check", max_concurrency=4),
        )
        for url, info in result.resources.items():
            print(url, info.content_type)
    """

    def __init__(self, handlers: CrawlHandlers):
        self.handlers = handlers

    async def crawl_async(
        self,
        entry_points: EntryPoints,
        options: Optional[CrawlOptions] = None,
    ) -> CrawlResult:
        """Crawl from *entry_points* and return every resource discovered.

        Raises:
            ConfigurationError: Invalid options or entry points (raised
                before anything is fetched).
            AccessDeniedError: A fatal access failure aborted the crawl.
            InternalError: The engine found its own state inconsistent.
        """
        options = options or CrawlOptions()
        options.validate()

        urls = [normalize_entry_point(url) for url in _as_list(entry_points)]
        if not urls:
            raise ConfigurationError("No crawl entry point provided")
        if options.content == "save_internal" and self.handlers.write_text is None:
            raise ConfigurationError(
                "Saving internal content requires a write_text handler"
            )

        base = resolve_base(urls, options.base)
        LOGGER.debug(
            "Starting crawl from %s (base=%s, external_links=%s)",
            ", ".join(urls),
            base,
            options.external_links,
        )

        run = _CrawlRun(self.handlers, options, base)
        result = await run.run(urls)
        LOGGER.info(
            "Crawl complete: %d resources (%d missing, %d errors)",
            result.stats["total_resources"],
            result.stats["missing_resources"],
            result.stats["error_count"],
        )
        return result


async def crawl_async(
    entry_points: EntryPoints,
    options: Optional[CrawlOptions] = None,
    *,
    index_name: str = DEFAULT_INDEX_NAME,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
    output_dir: Optional[str] = None,
) -> CrawlResult:
    """
    Crawl local files or web pages using the default access layer.

    Args:
        entry_points: URL(s) to start from (``file:`` or ``http(s):``).
        options: Crawl options (defaults to ``CrawlOptions()``).
        index_name: File served for ``file:`` directory URLs.
        timeout: HTTP timeout in seconds.
        user_agent: Optional User-Agent header for HTTP requests.
        output_dir: When set, internal resources are saved below this
            directory (implies ``content="save_internal"``).

    Returns:
        CrawlResult with one entry per discovered resource.
    """
    options = options or CrawlOptions()
    writer = None
    if output_dir:
        urls = [normalize_entry_point(url) for url in _as_list(entry_points)]
        base = resolve_base(urls, options.base) if urls else ""
        writer = ContentWriter(output_dir, base, index_name=index_name)
        options = replace(options, content="save_internal")

    async with DefaultAccess(
        index_name=index_name, timeout=timeout, user_agent=user_agent
    ) as access:
        handlers = create_crawl_handlers(access, writer=writer)
        return await Crawler(handlers).crawl_async(entry_points, options)


def crawl(
    entry_points: EntryPoints,
    options: Optional[CrawlOptions] = None,
    *,
    index_name: str = DEFAULT_INDEX_NAME,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
    output_dir: Optional[str] = None,
) -> CrawlResult:
    """Synchronous wrapper for crawl_async."""
    return asyncio.run(
        crawl_async(
            entry_points,
            options,
            index_name=index_name,
            timeout=timeout,
            user_agent=user_agent,
            output_dir=output_dir,
        )
    )
