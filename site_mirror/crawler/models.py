# site_mirror/crawler/models.py
"""
Data models for the site_mirror transport.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bs4.dammit import UnicodeDammit

_CSS_CHARSET_RE = re.compile(rb'^(?:\xef\xbb\xbf)?@charset\s+"([A-Za-z0-9_.:-]+)"\s*;')


@dataclass(slots=True)
class FetchResult:
    """Body and metadata of one successful response."""

    url: str
    body: bytes
    content_type: str = ""
    charset: Optional[str] = None
    final_url: Optional[str] = None

    def decode(self, is_html: bool = False) -> Tuple[str, str]:
        """
        Decode the body and report the encoding that was used.

        A byte order mark wins, then the charset from the Content-Type
        header, then the document's own declaration (``<meta charset>`` for
        markup, ``@charset`` for stylesheets), then detection by
        :class:`bs4.dammit.UnicodeDammit`.
        """
        if not self.body:
            return "", self.charset or "utf-8"
        hints: List[str] = [self.charset] if self.charset else []
        if not is_html:
            declared = _CSS_CHARSET_RE.match(self.body)
            if declared:
                hints.append(declared.group(1).decode("ascii"))
        dammit = UnicodeDammit(self.body, user_encodings=hints, is_html=is_html)
        if dammit.unicode_markup is None:
            return self.body.decode("utf-8", errors="replace"), "utf-8"
        encoding = dammit.original_encoding or "utf-8"
        if encoding.lower() in ("ascii", "us-ascii"):
            encoding = "utf-8"
        return dammit.unicode_markup, encoding

    def text(self) -> str:
        return self.decode(is_html="html" in self.content_type.lower())[0]
