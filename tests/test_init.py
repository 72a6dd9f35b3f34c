from __future__ import annotations

from unittest.mock import AsyncMock, patch

import linkcrawl
from linkcrawl import CheckLinksOptions, CheckLinksResult, CrawlResult


def test_public_names_are_exported():
    for name in linkcrawl.__all__:
        assert hasattr(linkcrawl, name), name


def test_version():
    assert linkcrawl.__version__ == "1.0.0"


def test_check_links_sync_wrapper():
    expected = CheckLinksResult()
    with patch(
        "linkcrawl.checker.check_links_async",
        new_callable=AsyncMock,
        return_value=expected,
    ) as mock:
        options = CheckLinksOptions(check_fragments=True)
        assert linkcrawl.check_links("https://example.com/", options) is expected

    mock.assert_awaited_once()
    assert mock.await_args.args == ("https://example.com/", options)


def test_crawl_sync_wrapper():
    expected = CrawlResult()
    with patch(
        "linkcrawl.crawler.crawl_async",
        new_callable=AsyncMock,
        return_value=expected,
    ) as mock:
        assert linkcrawl.crawl("https://example.com/", output_dir="out") is expected

    assert mock.await_args.kwargs["output_dir"] == "out"
