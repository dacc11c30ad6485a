# File: site_mirror/urls.py
"""
URL resolution and normalization for site_mirror.

Every URL that enters the dedup cache goes through :func:`normalize_url`,
so two spellings of the same address map to a single resource.
"""
from __future__ import annotations

import posixpath
from typing import Optional
from urllib.parse import parse_qsl, quote, unquote, urlencode, urljoin, urlparse, urlunparse

__all__ = ("resolve_url", "normalize_url", "is_http_url", "same_origin")

# RFC 3986 pchar set plus "/": these must survive re-quoting untouched
_PATH_SAFE = "/:@!$&'()*+,;=~-._"


def normalize_url(url: str) -> str:
    """
    Normalize an absolute URL: lowercase scheme and host, collapse dot
    segments, drop the fragment and sort query parameters.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    # posixpath keeps a leading "//" intact
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    norm = quote(norm, safe=_PATH_SAFE)
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, norm, parsed.params, query, ""))


def resolve_url(base: Optional[str], reference: str) -> str:
    """
    Resolve *reference* against *base* (relative, root-relative,
    protocol-relative or absolute) and normalize the result.

    Raises ValueError when the result is not an absolute URL.
    """
    raw = reference.strip()
    absolute = urljoin(base, raw) if base else raw
    parsed = urlparse(absolute)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"cannot resolve {reference!r} against {base!r}")
    return normalize_url(absolute)


def is_http_url(url: str) -> bool:
    return urlparse(url).scheme in ("http", "https")


def same_origin(a: str, b: str) -> bool:
    pa, pb = urlparse(a), urlparse(b)
    return (pa.scheme.lower(), pa.netloc.lower()) == (pb.scheme.lower(), pb.netloc.lower())
