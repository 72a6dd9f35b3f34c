"""Shared fixtures: an in-memory site served through CrawlHandlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Set

import pytest

from linkcrawl.errors import ResourceNotFoundError
from linkcrawl.resource import CrawlHandlers

HTML_TYPE = "text/html"
OTHER_TYPE = "application/octet-stream"
FILE_URL_PREFIX = "file:///"


def to_url(path_or_url: str) -> str:
    """Relative test paths live under ``file:///``; URLs pass through."""
    if ":" in path_or_url:
        return path_or_url
    return FILE_URL_PREFIX + path_or_url


def _path_or_url(url: str) -> str:
    if url.startswith(FILE_URL_PREFIX):
        return url[len(FILE_URL_PREFIX):]
    return url


@dataclass
class MemorySite:
    """Files keyed by relative path (``index.html``) or absolute URL."""

    files: Dict[str, str]
    queried: List[str] = field(default_factory=list)
    downloaded: List[str] = field(default_factory=list)
    written: Dict[str, str] = field(default_factory=dict)
    # URLs whose lookup raises the given exception instead
    failures: Dict[str, Exception] = field(default_factory=dict)
    unreadable: Set[str] = field(default_factory=set)

    async def get_content_type(self, url: str) -> str:
        self.queried.append(url)
        if url in self.failures:
            raise self.failures[url]
        key = _path_or_url(url)
        if key not in self.files:
            raise ResourceNotFoundError(url)
        return HTML_TYPE if key.endswith(".html") else OTHER_TYPE

    async def read_text(self, url: str) -> str:
        self.downloaded.append(url)
        if url in self.unreadable:
            raise ResourceNotFoundError(url, "read failed")
        key = _path_or_url(url)
        if key not in self.files:
            raise ResourceNotFoundError(url)
        return self.files[key]

    async def write_text(self, url: str, content: str) -> None:
        self.written[url] = content

    def handlers(self, *, with_writer: bool = False) -> CrawlHandlers:
        return CrawlHandlers(
            get_content_type=self.get_content_type,
            read_text=self.read_text,
            write_text=self.write_text if with_writer else None,
        )


@pytest.fixture
def make_site() -> Callable[..., MemorySite]:
    def _make(files: Dict[str, str], **kwargs) -> MemorySite:
        return MemorySite(files=dict(files), **kwargs)

    return _make


@pytest.fixture
def url() -> Callable[[str], str]:
    return to_url
