"""Tests for linkcrawl.parsers module."""

from linkcrawl.parsers import (
    DEFAULT_PARSERS,
    HTML_TYPE,
    XHTML_TYPE,
    get_parser,
    media_type,
    parse_html,
)


class TestParseHtml:
    def test_collects_link_attributes_in_order(self):
        html = """
        <html><head><link rel="stylesheet" href="style.css"></head>
        <body>
          <a href="a.html">A</a>
          <img src="logo.png">
          <a href="https://example.com/">ext</a>
        </body></html>
        """
        result = parse_html(html)
        assert result.hrefs == [
            "style.css",
            "a.html",
            "logo.png",
            "https://example.com/",
        ]

    def test_ignores_other_tags_and_empty_values(self):
        html = '<a>none</a><a href="">empty</a><script src="app.js"></script><img>'
        assert parse_html(html).hrefs == []

    def test_ids_not_recorded_by_default(self):
        result = parse_html('<h1 id="title">T</h1>')
        assert result.ids == set()

    def test_records_ids(self):
        html = '<h1 id="title">T</h1><section id="intro"><p id="">x</p></section>'
        result = parse_html(html, record_anchors=True)
        assert result.ids == {"title", "intro"}

    def test_keeps_fragments_and_schemes(self):
        html = '<a href="#top">t</a><a href="mailto:x@example.com">m</a>'
        assert parse_html(html).hrefs == ["#top", "mailto:x@example.com"]

    def test_malformed_markup(self):
        result = parse_html('<div><a href="a.html">unclosed<p id="p1">', True)
        assert result.hrefs == ["a.html"]
        assert result.ids == {"p1"}


class TestMediaType:
    def test_strips_parameters(self):
        assert media_type("text/html; charset=utf-8") == "text/html"

    def test_lowercases(self):
        assert media_type(" Text/HTML ") == "text/html"


class TestGetParser:
    def test_html_registered(self):
        assert get_parser(DEFAULT_PARSERS, HTML_TYPE) is parse_html
        assert get_parser(DEFAULT_PARSERS, XHTML_TYPE) is parse_html

    def test_with_parameters(self):
        assert get_parser(DEFAULT_PARSERS, "text/html;charset=UTF-8") is parse_html

    def test_unregistered(self):
        assert get_parser(DEFAULT_PARSERS, "text/css") is None

    def test_missing_content_type(self):
        assert get_parser(DEFAULT_PARSERS, None) is None
        assert get_parser(DEFAULT_PARSERS, "") is None
