"""Command-line interface for crawling sites and checking links."""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

from dotenv import load_dotenv

from . import __version__
from .access import DefaultAccess, create_crawl_handlers
from .capture import ContentWriter
from .checker import LinkChecker
from .cli_config import CONFIG_ENV_FILE, load_config
from .cli_output import (
    check_result_to_dict,
    crawl_result_to_dict,
    format_broken_links,
    to_json,
)
from .config import (
    EXTERNAL_LINK_STRATEGIES,
    CheckLinksOptions,
    CrawlOptions,
    EnvDefaults,
    load_env_defaults,
)
from .crawler import Crawler, resolve_base
from .errors import ConfigurationError
from .identity import normalize_entry_point, to_url
from .resource import CrawlHandlers


def _load_config() -> None:
    loaded = load_config(
        config_env_file=CONFIG_ENV_FILE,
        cwd=Path.cwd(),
        load_env=load_dotenv,
        copy_file=shutil.copy,
    )
    if loaded is not None:
        logging.debug("Loaded configuration from %s", loaded)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


class CrawlMonitor:
    """Wraps access handlers to log every request and collect a run summary."""

    def __init__(self, handlers: CrawlHandlers, *, log_level: int = logging.INFO):
        self.inner = handlers
        self.log_level = log_level
        self.query_count = 0
        self.download_count = 0
        self.error_count = 0
        self.host_names: set[str] = set()
        self.url_to_error: Dict[str, str] = {}
        self.handlers = CrawlHandlers(
            get_content_type=self._get_content_type,
            read_text=self._read_text,
            write_text=handlers.write_text,
            content_type_parsers=handlers.content_type_parsers,
        )

    async def _get_content_type(self, url: str) -> str:
        host = urlsplit(url).hostname
        if host:
            self.host_names.add(host)
        try:
            result = await self.inner.get_content_type(url)
        except Exception as exc:
            self._record_error("Query", url, exc)
            raise
        logging.log(self.log_level, "Query result: %s (%s)", url, result)
        self.query_count += 1
        return result

    async def _read_text(self, url: str) -> str:
        try:
            result = await self.inner.read_text(url)
        except Exception as exc:
            self._record_error("Download", url, exc)
            raise
        logging.log(
            self.log_level, "Download result: %s (length: %d)", url, len(result)
        )
        self.download_count += 1
        return result

    def _record_error(self, stage: str, url: str, exc: Exception) -> None:
        logging.log(self.log_level, "%s error: %s (%s)", stage, url, exc)
        self.error_count += 1
        self.url_to_error[url] = str(exc)

    def format_summary(self, saved: Optional[int] = None) -> str:
        lines = [
            "Crawl completed:",
            f"    Resources successfully queried: {self.query_count}",
            f"    Resources successfully retrieved: {self.download_count}",
        ]
        if saved is not None:
            lines.append(f"    Resources saved: {saved}")
        lines.append(f"    Error count: {self.error_count}")
        if self.host_names:
            lines.append(f"    Host names queried: {', '.join(sorted(self.host_names))}")
        if self.url_to_error:
            lines.append("    Errors:")
            for url, error in self.url_to_error.items():
                lines.append(f"        {url}: {error}")
        return "\n".join(lines)


def _entry_points(values: List[str]) -> List[str]:
    """Convert CLI arguments to URLs; local entry points must exist."""
    urls = []
    for value in values:
        url = to_url(value)
        if urlsplit(url).scheme == "file":
            path = Path(url2pathname(urlsplit(url).path))
            if not path.exists():
                raise ConfigurationError(f"Entry point not found: {value}")
        urls.append(url)
    return urls


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "entry_points",
        nargs="+",
        help="Entry point(s): local paths or URLs",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=None,
        help="Maximum concurrency (default: LINKCRAWL_CONCURRENCY or 1)",
    )
    parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=None,
        help="Maximum crawl depth (default: unbounded)",
    )
    parser.add_argument(
        "-b",
        "--base-url",
        type=str,
        default=None,
        help="Base URL for the site (default: entry point parent)",
    )
    parser.add_argument(
        "--index-name",
        type=str,
        default=None,
        help="Index name for file system directories (default: index.html)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the result as JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Display module version",
    )


# =============================================================================
# CRAWL COMMAND
# =============================================================================


def _parse_crawl_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="linkcrawl",
        description="Crawl a site from one or more entry points and list its resources.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Crawl a local site
  linkcrawl ./public/index.html

  # Crawl a web site, checking external links, 4 requests at a time
  linkcrawl https://docs.example.com/ -x check -c 4

  # Mirror internal pages into a directory
  linkcrawl https://docs.example.com/ -o mirror/

  # Full resource graph as JSON
  linkcrawl ./public/index.html --json --anchors
""",
    )
    _add_common_args(parser)
    parser.add_argument(
        "-x",
        "--external-links",
        type=str,
        choices=list(EXTERNAL_LINK_STRATEGIES),
        default="ignore",
        help="Strategy for external links (default: ignore)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Directory in which to save internal resources",
    )
    parser.add_argument(
        "--anchors",
        action="store_true",
        dest="record_anchors",
        help="Record element ids of parsed pages",
    )
    return parser.parse_args(argv)


async def _run_crawl_async(args: argparse.Namespace) -> int:
    """Main async entry point for crawl."""
    env = load_env_defaults()
    entry_points = _entry_points(args.entry_points)
    index_name = args.index_name or env.index_name
    options = CrawlOptions(
        base=to_url(args.base_url) if args.base_url else None,
        external_links=args.external_links,
        record_anchors=args.record_anchors,
        max_concurrency=_concurrency(args, env),
        max_depth=args.depth,
        content="save_internal" if args.output else "discard",
    )
    options.validate()
    base = resolve_base(
        [normalize_entry_point(url) for url in entry_points], options.base
    )

    logging.info("Starting crawl from: %s", ", ".join(entry_points))
    logging.info("    External link handling: %s", options.external_links)
    logging.info("    Max concurrency: %d", options.max_concurrency)
    logging.info(
        "    Max depth: %s", "unbounded" if options.max_depth is None else options.max_depth
    )
    logging.info("    Base URL: %s", base)
    logging.info("    Index path for file system URLs: %s", index_name)
    logging.info("    Output directory: %s", args.output or "(none)")

    async with DefaultAccess(
        index_name=index_name, timeout=env.timeout, user_agent=env.user_agent
    ) as access:
        writer = (
            ContentWriter(args.output, base, index_name=index_name)
            if args.output
            else None
        )
        monitor = CrawlMonitor(create_crawl_handlers(access, writer=writer))
        result = await Crawler(monitor.handlers).crawl_async(entry_points, options)

    logging.info("%s", monitor.format_summary(saved=writer.saved if writer else None))
    for url, error in result.errors.items():
        logging.warning("Processing error: %s (%s)", url, error)

    if args.json_output:
        print(to_json(crawl_result_to_dict(result)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for crawl command."""
    args = _parse_crawl_args(argv)
    _setup_logging(args.verbose)
    _load_config()

    try:
        return asyncio.run(_run_crawl_async(args))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return 1


# =============================================================================
# CHECK COMMAND
# =============================================================================


def _parse_check_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="linkcheck",
        description="Check a site for broken links.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Check a local site (fragments are checked by default)
  linkcheck ./public/index.html

  # Also check external links; use -c to speed this up
  linkcheck https://docs.example.com/ -x -c 8

  # Skip fragment checks, JSON output
  linkcheck ./public/ --no-check-fragments --json
""",
    )
    _add_common_args(parser)
    parser.add_argument(
        "-x",
        "--check-external-links",
        action="store_true",
        help='Check external links; note: consider using "-c N" to speed this up',
    )
    parser.add_argument(
        "-f",
        "--check-fragments",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Check URL fragment/hash against element ids (default: on)",
    )
    return parser.parse_args(argv)


async def _run_check_async(args: argparse.Namespace) -> int:
    """Main async entry point for link checking."""
    env = load_env_defaults()
    entry_points = _entry_points(args.entry_points)
    index_name = args.index_name or env.index_name
    options = CheckLinksOptions(
        base=to_url(args.base_url) if args.base_url else None,
        check_external_links=args.check_external_links,
        check_fragments=args.check_fragments,
        max_concurrency=_concurrency(args, env),
        max_depth=args.depth,
    )

    logging.debug("Starting crawl from: %s", ", ".join(entry_points))
    logging.debug("    Check external links: %s", options.check_external_links)
    logging.debug("    Check fragments: %s", options.check_fragments)
    logging.debug("    Max concurrency: %d", options.max_concurrency)
    logging.debug("    Base URL: %s", options.base or "(parent)")
    logging.debug("    Index path for file system URLs: %s", index_name)

    async with DefaultAccess(
        index_name=index_name, timeout=env.timeout, user_agent=env.user_agent
    ) as access:
        monitor = CrawlMonitor(create_crawl_handlers(access), log_level=logging.DEBUG)
        result = await LinkChecker(monitor.handlers).check_links_async(
            entry_points, options
        )

    logging.debug("%s", monitor.format_summary())
    for url, error in result.errors.items():
        logging.warning("Processing error: %s (%s)", url, error)

    if args.json_output:
        print(to_json(check_result_to_dict(result)))
    else:
        print(format_broken_links(result.broken_links))
    return 0


def check_main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for link check command."""
    args = _parse_check_args(argv)
    _setup_logging(args.verbose)
    _load_config()

    try:
        return asyncio.run(_run_check_async(args))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return 1


def _concurrency(args: argparse.Namespace, env: EnvDefaults) -> int:
    return args.concurrency if args.concurrency is not None else env.concurrency


if __name__ == "__main__":
    sys.exit(main())
