# File: tests/test_html_handler.py
"""Markup handler: attribute, srcset and inline CSS references with exact spans."""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from site_mirror.handlers.html import RECURSIVE_SOURCES, DEFAULT_SOURCES, HtmlHandler
from site_mirror.references import Delimiter, ReferenceForm
from site_mirror.resource import Resource
from site_mirror.scraper import Scraper


def page(text: str, url: str = "http://example.com/", local_path: str = "index.html") -> Resource:
    resource = Resource(url, local_path)
    resource.set_text(text)
    return resource


def raws(resource: Resource, handler: HtmlHandler | None = None) -> list[str]:
    return [m.raw for m in (handler or HtmlHandler()).extract(resource)]


def test_extracts_attributes_with_delimiters_and_spans():
    html = """<html>
<head>
  <link rel="stylesheet" href='css/site.css'>
  <script src=app.js></script>
</head>
<body>
  <img data-src="lazy.png" src="logo.png" alt="logo">
</body>
</html>"""
    resource = page(html)
    matches = HtmlHandler().extract(resource)

    assert [m.raw for m in matches] == ["css/site.css", "app.js", "logo.png"]
    assert [m.delimiter for m in matches] == [Delimiter.SINGLE, Delimiter.NONE, Delimiter.DOUBLE]
    assert all(m.form is ReferenceForm.ATTRIBUTE for m in matches)
    for m in matches:
        assert html[m.value_start : m.value_end] == m.raw
        assert html[m.start : m.end] == m.text
    assert matches[2].text == 'src="logo.png"'


def test_srcset_yields_one_reference_per_candidate():
    html = '<picture><source srcset="a.webp 1x, b.webp 2x"></picture><img srcset="c.png 480w,d.png 800w">'
    resource = page(html)
    matches = HtmlHandler().extract(resource)

    assert [m.raw for m in matches] == ["a.webp", "b.webp", "c.png", "d.png"]
    assert all(m.form is ReferenceForm.SRCSET for m in matches)
    for m in matches:
        assert html[m.value_start : m.value_end] == m.raw


def test_inline_css_is_scanned():
    html = (
        '<div style="background: url(bg.png)"></div>\n'
        "<style>\n  @import 'print.css';\n  .x { background: url(\"x.png\") }\n</style>"
    )
    assert raws(page(html)) == ["bg.png", "print.css", "x.png"]
    assert raws(page(html), HtmlHandler(inline_css=False)) == []


def test_anchors_are_followed_only_when_recursive():
    html = '<a href="about.html">About</a><a href="mailto:me@example.com">Mail</a><a href="#top">Top</a>'
    assert raws(page(html)) == []
    recursive = HtmlHandler(DEFAULT_SOURCES + RECURSIVE_SOURCES)
    assert raws(page(html), recursive) == ["about.html"]


def test_character_references_are_decoded_in_raw_value():
    html = '<img src="thumb.php?w=10&amp;h=20">'
    (match,) = HtmlHandler().extract(page(html))

    assert match.raw == "thumb.php?w=10&h=20"
    assert match.literal == "thumb.php?w=10&amp;h=20"


def test_base_href_changes_resolution_base():
    resource = page('<head><base href="/static/"></head><img src="a.png">', url="http://example.com/docs/page.html")
    assert HtmlHandler().base_url(resource) == "http://example.com/static/"
    assert HtmlHandler().base_url(page("<p>no base</p>")) == "http://example.com/"


def test_plain_text_has_no_references():
    assert raws(page("just some text with src=x.png")) == []


@pytest.mark.asyncio()
async def test_rewrite_touches_only_reported_spans(make_transport, monkeypatch):
    scraper = Scraper(make_transport({}))
    request = AsyncMock(
        side_effect=[
            Resource("http://example.com/logo.png", "img/logo.png"),
            Resource("http://example.com/bg.png", "img/bg.png"),
        ]
    )
    monkeypatch.setattr(scraper, "request_resource", request)
    html = (
        '<img data-src="logo.png" src="logo.png" title="logo.png">\n'
        "<div style=\"background:url('bg.png')\">logo.png</div>"
    )
    resource = page(html)

    await scraper.load_resource(resource)

    assert resource.get_text() == (
        '<img data-src="logo.png" src="img/logo.png" title="logo.png">\n'
        "<div style=\"background:url('img/bg.png')\">logo.png</div>"
    )


def test_entity_quoted_url_in_style_attribute():
    html = '<div style="background:url(&quot;x.png&quot;)"></div><p style="b:url(&quot;data:image/png;base64,AA&quot;)">'
    resource = page(html)
    (match,) = HtmlHandler().extract(resource)

    assert match.raw == "x.png"
    assert html[match.value_start : match.value_end] == "&quot;x.png&quot;"


def test_detach_base_removes_href_only():
    resource = page('<head><base href="http://example.com/static/" target="_blank"></head><img src="a.png">')

    assert HtmlHandler().detach_base(resource) == 1
    assert resource.get_text() == '<head><base  target="_blank"></head><img src="a.png">'
    assert HtmlHandler().detach_base(page("<p>no base</p>")) == 0


@pytest.mark.asyncio()
async def test_saved_page_has_no_remote_base(make_transport):
    transport = make_transport(
        {
            "http://example.com/": ('<head><base href="http://example.com/static/"></head><img src="a.png">', "text/html"),
            "http://example.com/static/a.png": (b"a", "image/png"),
        }
    )
    scraper = Scraper(transport)

    (root,) = await scraper.scrape(["http://example.com/"])

    assert transport.calls == ["http://example.com/", "http://example.com/static/a.png"]
    assert root.get_text() == '<head><base ></head><img src="a.png">'
    assert "http://example.com/static/" not in root.get_text()
