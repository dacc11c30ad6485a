# site_mirror/handlers/html.py
"""
Markup reference extraction.

BeautifulSoup selects the tags that carry references (CSS selectors over
the parsed tree). The parser records where each start tag begins in the
source, and the tag's attributes are scanned from there, so every match
carries the exact span of the attribute value as written.
"""
from __future__ import annotations

import html as html_lib
import re
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, SoupStrainer
from bs4.element import Tag

from site_mirror.handlers.base import Handler
from site_mirror.handlers.css import extract_css_references
from site_mirror.references import Delimiter, ReferenceForm, ReferenceMatch, is_fetchable
from site_mirror.resource import ContentKind, Resource

__all__ = ("Source", "DEFAULT_SOURCES", "RECURSIVE_SOURCES", "INLINE_CSS_SOURCES", "HtmlHandler")


class Source(NamedTuple):
    """Selector for tags holding a reference, and the attribute holding it.

    ``attr=None`` means the element's content (only ``<style>`` is scanned).
    """

    selector: str
    attr: Optional[str] = None


DEFAULT_SOURCES: Tuple[Source, ...] = (
    Source("img", "src"),
    Source("img", "srcset"),
    Source("input", "src"),
    Source("object", "data"),
    Source("embed", "src"),
    Source('param[name="movie"]', "value"),
    Source("script", "src"),
    Source('link[rel*="stylesheet"]', "href"),
    Source('link[rel*="icon"]', "href"),
    Source("picture source", "srcset"),
    Source("source", "src"),
    Source("video", "src"),
    Source("video", "poster"),
    Source("audio", "src"),
    Source("track", "src"),
    Source("iframe", "src"),
)
RECURSIVE_SOURCES: Tuple[Source, ...] = (Source("a", "href"),)
INLINE_CSS_SOURCES: Tuple[Source, ...] = (Source("[style]", "style"), Source("style", None))

_TAG_OPEN_RE = re.compile(r"<[^\s/>]+")
_ATTR_RE = re.compile(
    r"""[\s/]*(?P<name>[^\s"'>/=]+)(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'>][^\s>]*)))?"""
)
_STYLE_END_RE = re.compile(r"</style\s*>", re.IGNORECASE)


class _Attribute(NamedTuple):
    name: str
    value: str
    value_start: int
    value_end: int
    delimiter: Delimiter
    start: int
    end: int


class _Locator:
    """Maps (line, column) positions reported by the parser to text offsets."""

    def __init__(self, text: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer("\n", text)]
        self._text = text

    def offset(self, tag: Tag) -> Optional[int]:
        line, col = tag.sourceline, tag.sourcepos
        if line is None or col is None or not 0 < line <= len(self._starts):
            return None
        pos = self._starts[line - 1] + col
        return pos if self._text.startswith("<", pos) else None


def _iter_attributes(text: str, pos: int) -> Iterator[_Attribute]:
    opened = _TAG_OPEN_RE.match(text, pos)
    if not opened:
        return
    i = opened.end()
    while True:
        m = _ATTR_RE.match(text, i)
        if not m or m.end() == i:
            return
        i = m.end()
        for group, delimiter in (("dq", Delimiter.DOUBLE), ("sq", Delimiter.SINGLE), ("bare", Delimiter.NONE)):
            if m.group(group) is not None:
                yield _Attribute(
                    name=m.group("name").lower(),
                    value=m.group(group),
                    value_start=m.start(group),
                    value_end=m.end(group),
                    delimiter=delimiter,
                    start=m.start("name"),
                    end=m.end(),
                )
                break


def _start_tag_end(text: str, pos: int) -> int:
    """Offset just past the ``>`` closing the start tag at *pos*."""
    last = pos
    for attr in _iter_attributes(text, pos):
        last = attr.end
    if last == pos:
        opened = _TAG_OPEN_RE.match(text, pos)
        last = opened.end() if opened else pos
    close = text.find(">", last)
    return len(text) if close < 0 else close + 1


def _srcset_candidates(value: str) -> Iterator[Tuple[str, int, int]]:
    """Yield (url, start, end) for each candidate of a srcset value."""
    i, n = 0, len(value)
    while i < n:
        while i < n and (value[i].isspace() or value[i] == ","):
            i += 1
        if i >= n:
            return
        start = i
        while i < n and not value[i].isspace():
            i += 1
        end = i
        if value[start:end].endswith(","):
            end = start + len(value[start:end].rstrip(","))
        else:
            comma = value.find(",", i)
            i = n if comma < 0 else comma + 1
        if end > start:
            yield value[start:end], start, end


class HtmlHandler(Handler):
    kind = ContentKind.HTML

    def __init__(self, sources: Sequence[Source] = DEFAULT_SOURCES, *, inline_css: bool = True) -> None:
        rules = list(sources)
        if inline_css:
            rules.extend(s for s in INLINE_CSS_SOURCES if s not in rules)
        self.sources: Tuple[Source, ...] = tuple(rules)

    def base_url(self, resource: Resource) -> str:
        """Honor ``<base href>`` when the document declares one."""
        fallback = resource.base_url
        soup = BeautifulSoup(resource.get_text(), "html.parser", parse_only=SoupStrainer("base"))
        tag = soup.find("base", href=True)
        if isinstance(tag, Tag):
            href = tag.get("href")
            if isinstance(href, str) and href.strip():
                return urljoin(fallback, href.strip())
        return fallback

    def detach_base(self, resource: Resource) -> int:
        """
        Remove ``href`` from every ``<base>`` tag.

        The page's references are resolved against the base before this
        runs; afterwards the saved copy resolves its rewritten local paths
        against its own location. Returns the number of attributes removed.
        """
        text = resource.get_text()
        if "<base" not in text.lower():
            return 0
        soup = BeautifulSoup(text, "html.parser", parse_only=SoupStrainer("base"))
        locator = _Locator(text)
        removed = 0
        for tag in soup.find_all("base", href=True):
            pos = locator.offset(tag)
            if pos is None:
                continue
            for attr in _iter_attributes(text, pos):
                if attr.name == "href" and resource.remove_span(attr.start, attr.end):
                    removed += 1
        return removed

    def extract(self, resource: Resource) -> List[ReferenceMatch]:
        text = resource.get_text()
        if "<" not in text:
            return []
        soup = BeautifulSoup(text, "html.parser")
        locator = _Locator(text)
        found: Dict[Tuple[int, int], ReferenceMatch] = {}
        for source in self.sources:
            for tag in soup.select(source.selector):
                pos = locator.offset(tag)
                if pos is None:
                    continue
                if source.attr is None:
                    matches = self._content_matches(text, tag, pos)
                else:
                    matches = self._attribute_matches(text, pos, source.attr)
                for match in matches:
                    found.setdefault((match.value_start, match.value_end), match)
        return sorted(found.values(), key=lambda m: (m.start, m.value_start))

    def _attribute_matches(self, text: str, pos: int, attr_name: str) -> Iterator[ReferenceMatch]:
        for attr in _iter_attributes(text, pos):
            if attr.name != attr_name:
                continue
            if attr_name == "style":
                for match in extract_css_references(attr.value, attr.value_start):
                    decoded = _decoded(match)
                    if decoded is not None:
                        yield decoded
            elif attr_name == "srcset":
                for url, start, end in _srcset_candidates(attr.value):
                    raw = html_lib.unescape(url)
                    if not is_fetchable(raw):
                        continue
                    yield ReferenceMatch(
                        raw=raw,
                        text=url,
                        delimiter=attr.delimiter,
                        form=ReferenceForm.SRCSET,
                        start=attr.value_start + start,
                        end=attr.value_start + end,
                        value_start=attr.value_start + start,
                        value_end=attr.value_start + end,
                    )
            else:
                raw = html_lib.unescape(attr.value).strip()
                if not is_fetchable(raw):
                    continue
                yield ReferenceMatch(
                    raw=raw,
                    text=text[attr.start : attr.end],
                    delimiter=attr.delimiter,
                    form=ReferenceForm.ATTRIBUTE,
                    start=attr.start,
                    end=attr.end,
                    value_start=attr.value_start,
                    value_end=attr.value_end,
                )

    @staticmethod
    def _content_matches(text: str, tag: Tag, pos: int) -> List[ReferenceMatch]:
        if tag.name != "style":
            return []
        begin = _start_tag_end(text, pos)
        closing = _STYLE_END_RE.search(text, begin)
        end = closing.start() if closing else len(text)
        return extract_css_references(text[begin:end], begin)


def _decoded(match: ReferenceMatch) -> Optional[ReferenceMatch]:
    """Decode character references in a value found inside an attribute.

    Quotes written as ``&quot;`` are not seen by the CSS scanner, so they
    are stripped here; None when the decoded value is not fetchable.
    """
    raw = html_lib.unescape(match.raw)
    if raw == match.raw:
        return match
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        raw = raw[1:-1].strip()
    if not is_fetchable(raw):
        return None
    return ReferenceMatch(
        raw=raw,
        text=match.text,
        delimiter=match.delimiter,
        form=match.form,
        start=match.start,
        end=match.end,
        value_start=match.value_start,
        value_end=match.value_end,
    )
