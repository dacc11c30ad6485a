# site_mirror/crawler/filenames.py
"""
Filename strategy: assigns each fetched URL a unique local path.
"""
from __future__ import annotations

import mimetypes
import posixpath
import re
from typing import Dict, Mapping, Optional, Sequence, Set
from urllib.parse import unquote, urlparse

from site_mirror.resource import ContentKind

__all__ = ("FilenameStrategy", "sanitize_filename")

_INVALID_FILENAME_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_HTML_LIKE_EXTS = {".html", ".htm", ".xhtml", ".shtml"}
_MAX_NAME = 200

# extensions mimetypes gets wrong or does not know
_MIME_EXTS: Dict[str, str] = {
    "application/javascript": ".js",
    "text/javascript": ".js",
    "application/json": ".json",
    "image/svg+xml": ".svg",
    "image/jpeg": ".jpg",
    "font/woff2": ".woff2",
    "font/woff": ".woff",
    "application/manifest+json": ".webmanifest",
}


def sanitize_filename(name: str) -> str:
    name = _INVALID_FILENAME_CHARS_RE.sub("_", name)
    name = name or "file"
    if name.startswith("."):
        name = "_" + name[1:]
    return name[:_MAX_NAME]


def _ext_for_type(content_type: Optional[str]) -> str:
    if not content_type:
        return ""
    mime = content_type.split(";", 1)[0].strip().lower()
    return _MIME_EXTS.get(mime) or mimetypes.guess_extension(mime) or ""


class FilenameStrategy:
    """
    Maps URLs to local paths that are unique within one crawl session.

    The file name is the last path segment of the URL. Files are grouped
    into subdirectories by extension; clashes get a numeric suffix
    (``logo.png``, ``logo_1.png``, ...), compared case-insensitively.
    """

    def __init__(
        self,
        subdirectories: Optional[Mapping[str, Sequence[str]]] = None,
        default_filename: str = "index.html",
    ) -> None:
        self.default_filename = default_filename
        self._dir_by_ext: Dict[str, str] = {}
        for directory, exts in (subdirectories or {}).items():
            for ext in exts:
                self._dir_by_ext.setdefault(ext.lower(), directory)
        self._taken: Set[str] = set()

    def assign(self, url: str, kind: ContentKind, content_type: Optional[str] = None) -> str:
        parsed = urlparse(url)
        path = unquote(parsed.path)
        name = "" if path.endswith("/") else posixpath.basename(path)
        if not name:
            name = self.default_filename
        base, ext = posixpath.splitext(sanitize_filename(name))
        ext = ext.lower()
        if kind is ContentKind.HTML and ext not in _HTML_LIKE_EXTS:
            base, ext = base + ext.replace(".", "_"), ".html"
        elif kind is ContentKind.CSS and ext != ".css":
            base, ext = base + ext.replace(".", "_"), ".css"
        elif not ext:
            ext = _ext_for_type(content_type)
        directory = self._dir_by_ext.get(ext, "")
        return self._reserve(directory, base, ext)

    def _reserve(self, directory: str, base: str, ext: str) -> str:
        candidate = posixpath.join(directory, base + ext)
        n = 0
        while candidate.lower() in self._taken:
            n += 1
            candidate = posixpath.join(directory, f"{base}_{n}{ext}")
        self._taken.add(candidate.lower())
        return candidate
