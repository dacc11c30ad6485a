# File: tests/test_filenames.py
"""Local path assignment."""
import pytest

from site_mirror.config import DEFAULT_SUBDIRECTORIES
from site_mirror.crawler.filenames import FilenameStrategy, sanitize_filename
from site_mirror.resource import ContentKind


@pytest.fixture()
def strategy() -> FilenameStrategy:
    return FilenameStrategy(DEFAULT_SUBDIRECTORIES)


def test_sanitize_filename():
    assert sanitize_filename('a<b>:c"d|e?f*g.png') == "a_b__c_d_e_f_g.png"
    assert sanitize_filename(".htaccess") == "_htaccess"
    assert sanitize_filename("") == "file"


@pytest.mark.parametrize(
    "url,kind,content_type,expected",
    [
        ("http://example.com/", ContentKind.HTML, "text/html", "index.html"),
        ("http://example.com/docs/", ContentKind.HTML, "text/html", "index.html"),
        ("http://example.com/page.php", ContentKind.HTML, "text/html", "page_php.html"),
        ("http://example.com/about", ContentKind.HTML, "text/html", "about.html"),
        ("http://example.com/static/main.css", ContentKind.CSS, "text/css", "css/main.css"),
        ("http://example.com/fonts.googleapis", ContentKind.CSS, "text/css", "css/fonts_googleapis.css"),
        ("http://example.com/a/LOGO.PNG", ContentKind.BINARY, "image/png", "img/LOGO.png"),
        ("http://example.com/avatar", ContentKind.BINARY, "image/jpeg", "img/avatar.jpg"),
        ("http://example.com/app.js", ContentKind.BINARY, "application/javascript", "js/app.js"),
        ("http://example.com/data.bin", ContentKind.BINARY, None, "data.bin"),
    ],
)
def test_assign(strategy, url, kind, content_type, expected):
    assert strategy.assign(url, kind, content_type) == expected


def test_assign_keeps_names_unique(strategy):
    first = strategy.assign("http://example.com/a/logo.png", ContentKind.BINARY)
    second = strategy.assign("http://example.com/b/logo.png", ContentKind.BINARY)
    third = strategy.assign("http://example.com/c/Logo.png", ContentKind.BINARY)

    assert (first, second, third) == ("img/logo.png", "img/logo_1.png", "img/Logo_2.png")


def test_assign_without_subdirectories():
    strategy = FilenameStrategy(default_filename="home.html")
    assert strategy.assign("http://example.com/", ContentKind.HTML) == "home.html"
    assert strategy.assign("http://example.com/x/pic.gif", ContentKind.BINARY) == "pic.gif"
