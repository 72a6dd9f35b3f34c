"""Default resource access for ``file:`` and ``http(s):`` URLs.

Example usage:

    from linkcrawl.access import DefaultAccess, create_crawl_handlers
    from linkcrawl.crawler import Crawler

    async with DefaultAccess(index_name="index.html") as access:
        crawler = Crawler(create_crawl_handlers(access))
        result = await crawler.crawl_async("https://docs.example.com/")
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import re
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx

from .config import DEFAULT_INDEX_NAME, DEFAULT_TIMEOUT
from .errors import AccessDeniedError, ResourceNotFoundError
from .parsers import DEFAULT_PARSERS, HTML_TYPE, ContentTypeParser
from .resource import CrawlHandlers

if TYPE_CHECKING:
    from .capture import ContentWriter

LOGGER = logging.getLogger(__name__)

OTHER_TYPE = "application/octet-stream"
HTML_FILE_PATTERN = re.compile(r"\.x?html?$", re.IGNORECASE)
REQUEST_HEADERS = {
    "Accept": "text/html, application/xhtml+xml, application/xml;q=0.9, */*;q=0.8",
}
# Servers that refuse HEAD get a GET instead
HEAD_UNSUPPORTED_STATUSES = frozenset((405, 501))


class DefaultAccess:
    """Resolves content types and reads text from files and web servers.

    Missing files, HTTP error statuses and transport errors raise
    ResourceNotFoundError. Local permission problems raise
    AccessDeniedError, which aborts the crawl.
    """

    def __init__(
        self,
        *,
        index_name: str = DEFAULT_INDEX_NAME,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.index_name = index_name
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "DefaultAccess":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # -----------------------------------------------------------------------
    # Access contract
    # -----------------------------------------------------------------------

    async def get_content_type(self, url: str) -> str:
        scheme = urlsplit(url).scheme.lower()
        if scheme == "file":
            path = await asyncio.to_thread(self._existing_file, url)
            return _guess_file_type(path)
        if scheme in ("http", "https"):
            return await self._http_content_type(url)
        raise ResourceNotFoundError(url, f"unsupported scheme: {scheme or '(none)'}")

    async def read_text(self, url: str) -> str:
        scheme = urlsplit(url).scheme.lower()
        if scheme == "file":
            return await asyncio.to_thread(self._read_file, url)
        if scheme in ("http", "https"):
            response = await self._request("GET", url)
            return response.text
        raise ResourceNotFoundError(url, f"unsupported scheme: {scheme or '(none)'}")

    # -----------------------------------------------------------------------
    # File system
    # -----------------------------------------------------------------------

    def file_path(self, url: str) -> Path:
        """Map a ``file:`` URL to a local path (directories -> index file).

        A directory URL without a trailing slash is served from its index
        file as well, but stays keyed as written: relative links on that
        page resolve against the parent directory, not the directory itself.
        """
        parts = urlsplit(url)
        path = Path(url2pathname(parts.path))
        if parts.path.endswith("/") or path.is_dir():
            path = path / self.index_name
        return path

    def _existing_file(self, url: str) -> Path:
        try:
            path = self.file_path(url)
            if not path.is_file():
                raise ResourceNotFoundError(url)
        except PermissionError as exc:
            raise AccessDeniedError(url, str(exc)) from exc
        return path

    def _read_file(self, url: str) -> str:
        try:
            return self.file_path(url).read_text(encoding="utf-8", errors="replace")
        except PermissionError as exc:
            raise AccessDeniedError(url, str(exc)) from exc
        except OSError as exc:
            raise ResourceNotFoundError(url, str(exc)) from exc

    # -----------------------------------------------------------------------
    # HTTP
    # -----------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers: Dict[str, str] = dict(REQUEST_HEADERS)
            if self.user_agent:
                headers["User-Agent"] = self.user_agent
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    async def _http_content_type(self, url: str) -> str:
        response = await self._send("HEAD", url)
        if response.status_code in HEAD_UNSUPPORTED_STATUSES:
            LOGGER.debug("HEAD not supported for %s, retrying with GET", url)
            response = await self._send("GET", url)
        _raise_for_status(response, url)
        return response.headers.get("content-type") or ""

    async def _request(self, method: str, url: str) -> httpx.Response:
        response = await self._send(method, url)
        _raise_for_status(response, url)
        return response

    async def _send(self, method: str, url: str) -> httpx.Response:
        try:
            return await self._get_client().request(method, url)
        except httpx.RequestError as exc:
            raise ResourceNotFoundError(url, f"request failed: {exc}") from exc


def _raise_for_status(response: httpx.Response, url: str) -> None:
    if response.is_error:
        raise ResourceNotFoundError(url, f"HTTP {response.status_code}")


def _guess_file_type(path: Path) -> str:
    if HTML_FILE_PATTERN.search(path.name):
        return HTML_TYPE
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or OTHER_TYPE


def create_crawl_handlers(
    access: DefaultAccess,
    *,
    writer: Optional["ContentWriter"] = None,
    parsers: Optional[Dict[str, ContentTypeParser]] = None,
) -> CrawlHandlers:
    """Bundle *access* (and an optional content writer) for the crawl engine."""
    return CrawlHandlers(
        get_content_type=access.get_content_type,
        read_text=access.read_text,
        write_text=writer.write_text if writer is not None else None,
        content_type_parsers=dict(parsers if parsers is not None else DEFAULT_PARSERS),
    )
