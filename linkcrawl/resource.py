"""Data structures shared by the crawl engine, the checker and collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Set

from .parsers import DEFAULT_PARSERS, ContentTypeParser

ContentTypeLookup = Callable[[str], Awaitable[str]]
TextReader = Callable[[str], Awaitable[str]]
TextWriter = Callable[[str, str], Awaitable[None]]


@dataclass(slots=True)
class Link:
    """Outgoing link recorded on a parsed resource."""

    url: str  # absolute, fragment kept
    href: str  # reference text as written in the source


@dataclass(slots=True)
class ResourceInfo:
    """Public view of one discovered resource.

    ``content_type`` is None when the resource could not be resolved.
    ``links`` is only set for parsed resources, ``ids`` only when anchors
    were recorded as well.
    """

    content_type: Optional[str] = None
    links: Optional[List[Link]] = None
    ids: Optional[Set[str]] = None


@dataclass
class CrawlResult:
    """Result of a crawl run."""

    resources: Dict[str, ResourceInfo] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    stats: Dict[str, int] = field(default_factory=dict)


@dataclass
class CrawlHandlers:
    """Collaborators the crawl engine delegates resource access and parsing to.

    Attributes:
        get_content_type: Resolves a URL to its content type. Raises
            ResourceNotFoundError for missing resources and
            AccessDeniedError for fatal failures.
        read_text: Returns the text content of a URL, same error contract.
        write_text: Optional sink for captured content.
        content_type_parsers: Parser registry keyed by media type.
    """

    get_content_type: ContentTypeLookup
    read_text: TextReader
    write_text: Optional[TextWriter] = None
    content_type_parsers: Dict[str, ContentTypeParser] = field(
        default_factory=lambda: dict(DEFAULT_PARSERS)
    )
