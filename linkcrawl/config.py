"""Option structures for crawl and link-check runs."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

EXTERNAL_LINK_STRATEGIES = ("ignore", "check", "follow")
CONTENT_MODES = ("discard", "save_internal")

DEFAULT_INDEX_NAME = "index.html"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "linkcrawl/1.0"


@dataclass
class CrawlOptions:
    """Options for a crawl run.

    Attributes:
        base: Prefix that marks a URL as internal. Defaults to the parent
            directory of the entry point(s).
        external_links: ``ignore`` external links, ``check`` that they
            resolve, or ``follow`` them like internal ones.
        record_anchors: Record element ids of parsed resources.
        max_concurrency: Maximum resources processed at once.
        max_depth: Resources at this depth or deeper are checked but not
            parsed. None means unbounded.
        content: ``discard`` retrieved text, or ``save_internal`` to pass
            internal resources to the handlers' ``write_text``.
    """

    base: Optional[str] = None
    external_links: str = "ignore"
    record_anchors: bool = False
    max_concurrency: int = 1
    max_depth: Optional[int] = None
    content: str = "discard"

    @property
    def check_external_links(self) -> bool:
        return self.external_links in ("check", "follow")

    @property
    def follow_external_links(self) -> bool:
        return self.external_links == "follow"

    def validate(self) -> None:
        """Raise ConfigurationError for out-of-range values."""
        if self.external_links not in EXTERNAL_LINK_STRATEGIES:
            raise ConfigurationError(
                f"Unknown external link strategy: {self.external_links!r} "
                f"(expected one of: {', '.join(EXTERNAL_LINK_STRATEGIES)})"
            )
        if self.content not in CONTENT_MODES:
            raise ConfigurationError(
                f"Unknown content mode: {self.content!r} "
                f"(expected one of: {', '.join(CONTENT_MODES)})"
            )
        if self.max_concurrency <= 0:
            raise ConfigurationError(
                f"max_concurrency must be > 0 (got {self.max_concurrency})"
            )
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigurationError(
                f"max_depth must be >= 0 (got {self.max_depth})"
            )


@dataclass
class CheckLinksOptions:
    """Options for a link-check run."""

    base: Optional[str] = None
    check_external_links: bool = False
    check_fragments: bool = False
    max_concurrency: int = 1
    max_depth: Optional[int] = None

    def to_crawl_options(self) -> CrawlOptions:
        """Map onto the options of the underlying crawl."""
        return CrawlOptions(
            base=self.base,
            external_links="check" if self.check_external_links else "ignore",
            record_anchors=self.check_fragments,
            max_concurrency=self.max_concurrency,
            max_depth=self.max_depth,
        )


# ---------------------------------------------------------------------------
# Environment defaults
# ---------------------------------------------------------------------------


@dataclass
class EnvDefaults:
    """CLI defaults that can be overridden through ``LINKCRAWL_*`` variables."""

    concurrency: int = 1
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    index_name: str = DEFAULT_INDEX_NAME


def _env_number(name: str, default, convert):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s.", name, raw, default)
        return default


def load_env_defaults() -> EnvDefaults:
    """Read ``LINKCRAWL_*`` variables.

    Called at run time rather than import time so that ``.env`` files loaded
    by the CLI and monkeypatched environments are honoured.
    """
    return EnvDefaults(
        concurrency=_env_number("LINKCRAWL_CONCURRENCY", 1, int),
        timeout=_env_number("LINKCRAWL_TIMEOUT", DEFAULT_TIMEOUT, float),
        user_agent=os.getenv("LINKCRAWL_USER_AGENT") or DEFAULT_USER_AGENT,
        index_name=os.getenv("LINKCRAWL_INDEX_NAME") or DEFAULT_INDEX_NAME,
    )
