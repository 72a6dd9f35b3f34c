"""Content parsers that extract outbound links and anchor ids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Set

from bs4 import BeautifulSoup

HTML_TYPE = "text/html"
XHTML_TYPE = "application/xhtml+xml"
XML_TYPE = "application/xml"

# Attribute holding the link target, per tag name
TAG_TO_LINK_ATTRIBUTE: Dict[str, str] = {
    "a": "href",
    "link": "href",
    "img": "src",
}


@dataclass(slots=True)
class ParseResult:
    """Raw references and anchor ids found in one resource."""

    hrefs: List[str] = field(default_factory=list)
    ids: Set[str] = field(default_factory=set)


ContentTypeParser = Callable[[str, bool], ParseResult]


def parse_html(content: str, record_anchors: bool = False) -> ParseResult:
    """Collect link targets (in document order) and, optionally, element ids."""
    result = ParseResult()
    soup = BeautifulSoup(content, "html.parser")

    for tag in soup.find_all(True):
        if record_anchors:
            element_id = tag.get("id")
            if element_id:
                result.ids.add(element_id)

        attribute = TAG_TO_LINK_ATTRIBUTE.get(tag.name)
        if attribute:
            href = tag.get(attribute)
            if href:
                result.hrefs.append(href)

    return result


DEFAULT_PARSERS: Dict[str, ContentTypeParser] = {
    HTML_TYPE: parse_html,
    XHTML_TYPE: parse_html,
    XML_TYPE: parse_html,
}


def media_type(content_type: str) -> str:
    """Strip parameters from a content type (``text/html; charset=utf-8``)."""
    return content_type.split(";", 1)[0].strip().lower()


def get_parser(
    parsers: Mapping[str, ContentTypeParser], content_type: Optional[str]
) -> Optional[ContentTypeParser]:
    """Look up the parser registered for *content_type*, if any."""
    if not content_type:
        return None
    return parsers.get(media_type(content_type))
