"""Output and formatting helpers for CLI commands."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .checker import BrokenLink, CheckLinksResult
from .resource import CrawlResult, ResourceInfo


def resource_to_dict(info: ResourceInfo) -> Dict[str, Any]:
    """Convert a resource to a JSON-serializable dict.

    Keys for links and ids are only present when the resource was parsed,
    mirroring the ResourceInfo fields.
    """
    data: Dict[str, Any] = {"content_type": info.content_type}
    if info.links is not None:
        data["links"] = [{"url": link.url, "href": link.href} for link in info.links]
    if info.ids is not None:
        data["ids"] = sorted(info.ids)
    return data


def crawl_result_to_dict(result: CrawlResult) -> Dict[str, Any]:
    return {
        "resources": {
            url: resource_to_dict(info) for url, info in result.resources.items()
        },
        "errors": dict(result.errors),
        "stats": dict(result.stats),
    }


def broken_link_to_dict(link: BrokenLink) -> Dict[str, str]:
    return {"source": link.source, "target": link.target, "href": link.href}


def check_result_to_dict(result: CheckLinksResult) -> Dict[str, Any]:
    return {
        "broken_links": [broken_link_to_dict(link) for link in result.broken_links],
        "errors": dict(result.errors),
    }


def to_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_broken_links(broken_links: List[BrokenLink]) -> str:
    """Format broken links for the terminal.

    Example output:
    Broken links:

        file:///site/index.html -> style.css (file:///site/style.css)
    """
    if not broken_links:
        return "No broken links detected"

    lines = ["Broken links:", ""]
    for link in broken_links:
        line = f"    {link.source} -> {link.href}"
        if link.href != link.target:
            line += f" ({link.target})"
        lines.append(line)
    return "\n".join(lines)
