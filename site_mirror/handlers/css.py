# site_mirror/handlers/css.py
"""
Stylesheet reference extraction.

Two forms are recognized: ``@import "x"`` / ``@import 'x'`` and functional
``url(x)``, ``url('x')``, ``url("x")`` (which also covers
``@import url(...)``). Comments are consumed by the scanner and never
produce references.
"""
from __future__ import annotations

import re
from typing import List

from site_mirror.handlers.base import Handler
from site_mirror.references import Delimiter, ReferenceForm, ReferenceMatch, is_fetchable
from site_mirror.resource import ContentKind, Resource

__all__ = ("CssHandler", "extract_css_references")

_CSS_TOKEN_RE = re.compile(
    r"""
    (?P<comment>/\*.*?\*/)
    |
    (?P<import>@import\s*(?P<iq>["'])(?P<ival>[^"'\n]*)(?P=iq))
    |
    (?P<url>\burl\(\s*(?:(?P<uq>["'])(?P<uqval>[^"'\n]*)(?P=uq)|(?P<ubare>[^)"'\s]*))\s*\))
    """,
    re.IGNORECASE | re.DOTALL | re.VERBOSE,
)
_IMPORT_BEFORE_RE = re.compile(r"@import\s*$", re.IGNORECASE)


def extract_css_references(css: str, offset: int = 0) -> List[ReferenceMatch]:
    """Scan *css* and return its reference occurrences; spans are shifted by *offset*."""
    found: List[ReferenceMatch] = []
    for m in _CSS_TOKEN_RE.finditer(css):
        if m.group("comment"):
            continue
        if m.group("import"):
            group, quote, form = "ival", m.group("iq"), ReferenceForm.IMPORT
        elif m.group("uq"):
            group, quote = "uqval", m.group("uq")
            form = _url_form(css, m.start())
        else:
            group, quote = "ubare", None
            form = _url_form(css, m.start())
        raw = m.group(group).strip()
        if not is_fetchable(raw):
            continue
        found.append(
            ReferenceMatch(
                raw=raw,
                text=m.group(0),
                delimiter=Delimiter.from_quote(quote),
                form=form,
                start=m.start() + offset,
                end=m.end() + offset,
                value_start=m.start(group) + offset,
                value_end=m.end(group) + offset,
            )
        )
    return found


def _url_form(css: str, start: int) -> ReferenceForm:
    window = css[max(0, start - 32) : start]
    return ReferenceForm.IMPORT if _IMPORT_BEFORE_RE.search(window) else ReferenceForm.URL


class CssHandler(Handler):
    kind = ContentKind.CSS

    def extract(self, resource: Resource) -> List[ReferenceMatch]:
        return extract_css_references(resource.get_text())
