"""Tests for linkcrawl.access module."""

from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from linkcrawl.access import OTHER_TYPE, DefaultAccess, create_crawl_handlers
from linkcrawl.capture import ContentWriter
from linkcrawl.errors import AccessDeniedError, ResourceNotFoundError
from linkcrawl.parsers import DEFAULT_PARSERS, HTML_TYPE


def _mock_access(handler) -> DefaultAccess:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DefaultAccess(client=client)


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    (tmp_path / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    (tmp_path / "style.css").write_text("body {}", encoding="utf-8")
    (tmp_path / "data.unknownext").write_text("?", encoding="utf-8")
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<p>Docs</p>", encoding="utf-8")
    (tmp_path / "empty").mkdir()
    return tmp_path


class TestFileAccess:
    @pytest.mark.asyncio
    async def test_html_content_type(self, site_dir: Path):
        access = DefaultAccess()
        url = (site_dir / "index.html").as_uri()
        assert await access.get_content_type(url) == HTML_TYPE

    @pytest.mark.asyncio
    async def test_guessed_content_type(self, site_dir: Path):
        access = DefaultAccess()
        assert await access.get_content_type((site_dir / "style.css").as_uri()) == "text/css"

    @pytest.mark.asyncio
    async def test_unknown_extension(self, site_dir: Path):
        access = DefaultAccess()
        url = (site_dir / "data.unknownext").as_uri()
        assert await access.get_content_type(url) == OTHER_TYPE

    @pytest.mark.asyncio
    async def test_directory_uses_index_file(self, site_dir: Path):
        access = DefaultAccess()
        url = (site_dir / "docs").as_uri() + "/"
        assert await access.get_content_type(url) == HTML_TYPE
        assert await access.read_text(url) == "<p>Docs</p>"

    @pytest.mark.asyncio
    async def test_directory_without_trailing_slash(self, site_dir: Path):
        access = DefaultAccess()
        url = (site_dir / "docs").as_uri()
        assert access.file_path(url) == site_dir / "docs" / "index.html"
        assert await access.read_text(url) == "<p>Docs</p>"

    @pytest.mark.asyncio
    async def test_directory_without_index(self, site_dir: Path):
        access = DefaultAccess()
        with pytest.raises(ResourceNotFoundError):
            await access.get_content_type((site_dir / "empty").as_uri() + "/")

    @pytest.mark.asyncio
    async def test_custom_index_name(self, site_dir: Path):
        (site_dir / "empty" / "default.htm").write_text("<p>x</p>", encoding="utf-8")
        access = DefaultAccess(index_name="default.htm")
        url = (site_dir / "empty").as_uri() + "/"
        assert await access.get_content_type(url) == HTML_TYPE

    @pytest.mark.asyncio
    async def test_missing_file(self, site_dir: Path):
        access = DefaultAccess()
        with pytest.raises(ResourceNotFoundError, match="Resource not found"):
            await access.get_content_type((site_dir / "nope.html").as_uri())

    @pytest.mark.asyncio
    async def test_read_text(self, site_dir: Path):
        access = DefaultAccess()
        assert await access.read_text((site_dir / "index.html").as_uri()) == "<h1>Home</h1>"

    @pytest.mark.asyncio
    async def test_read_missing_file(self, site_dir: Path):
        access = DefaultAccess()
        with pytest.raises(ResourceNotFoundError):
            await access.read_text((site_dir / "nope.html").as_uri())

    @pytest.mark.asyncio
    async def test_permission_error_is_fatal(self, site_dir: Path):
        access = DefaultAccess()
        url = (site_dir / "index.html").as_uri()
        with patch.object(Path, "read_text", side_effect=PermissionError("denied")):
            with pytest.raises(AccessDeniedError, match="denied"):
                await access.read_text(url)

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self):
        access = DefaultAccess()
        with pytest.raises(ResourceNotFoundError, match="unsupported scheme"):
            await access.get_content_type("ftp://example.com/file.txt")
        with pytest.raises(ResourceNotFoundError, match="unsupported scheme"):
            await access.read_text("ftp://example.com/file.txt")


class TestHttpAccess:
    @pytest.mark.asyncio
    async def test_head_content_type(self):
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(200, headers={"Content-Type": "text/html; charset=utf-8"})

        async with _mock_access(handler) as access:
            content_type = await access.get_content_type("https://example.test/")

        assert content_type == "text/html; charset=utf-8"
        assert methods == ["HEAD"]

    @pytest.mark.asyncio
    async def test_head_not_allowed_falls_back_to_get(self):
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            if request.method == "HEAD":
                return httpx.Response(405)
            return httpx.Response(200, headers={"Content-Type": "text/css"}, text="a{}")

        async with _mock_access(handler) as access:
            assert await access.get_content_type("https://example.test/a.css") == "text/css"
        assert methods == ["HEAD", "GET"]

    @pytest.mark.asyncio
    async def test_missing_content_type_header(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        async with _mock_access(handler) as access:
            assert await access.get_content_type("https://example.test/x") == ""

    @pytest.mark.asyncio
    async def test_error_status_is_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with _mock_access(handler) as access:
            with pytest.raises(ResourceNotFoundError, match="HTTP 404"):
                await access.get_content_type("https://example.test/gone")
            with pytest.raises(ResourceNotFoundError, match="HTTP 404"):
                await access.read_text("https://example.test/gone")

    @pytest.mark.asyncio
    async def test_transport_error_is_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _mock_access(handler) as access:
            with pytest.raises(ResourceNotFoundError, match="request failed"):
                await access.get_content_type("https://unreachable.test/")

    @pytest.mark.asyncio
    async def test_read_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(200, text="<a href='x.html'>x</a>")

        async with _mock_access(handler) as access:
            assert await access.read_text("https://example.test/") == "<a href='x.html'>x</a>"


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_owned_client_has_headers(self):
        access = DefaultAccess(user_agent="linkcrawl-test/1.0", timeout=5)
        client = access._get_client()
        assert client.headers["User-Agent"] == "linkcrawl-test/1.0"
        assert "text/html" in client.headers["Accept"]
        await access.aclose()
        assert client.is_closed

    @pytest.mark.asyncio
    async def test_provided_client_left_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with DefaultAccess(client=client):
            pass
        assert not client.is_closed
        await client.aclose()


class TestCreateCrawlHandlers:
    def test_without_writer(self):
        access = DefaultAccess()
        handlers = create_crawl_handlers(access)
        assert handlers.get_content_type == access.get_content_type
        assert handlers.read_text == access.read_text
        assert handlers.write_text is None
        assert handlers.content_type_parsers == DEFAULT_PARSERS
        assert handlers.content_type_parsers is not DEFAULT_PARSERS

    def test_with_writer(self, tmp_path: Path):
        writer = ContentWriter(tmp_path, "file:///site/")
        handlers = create_crawl_handlers(DefaultAccess(), writer=writer)
        assert handlers.write_text == writer.write_text
