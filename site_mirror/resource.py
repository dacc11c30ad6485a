# site_mirror/resource.py
"""
Resource graph for site_mirror.

A :class:`Resource` is a node of the crawl graph. Nodes live in a
:class:`ResourceGraph` arena and refer to each other by integer id only,
so shared children (diamonds) and reference cycles never create object
cycles.
"""
from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple
from urllib.parse import urlparse

from site_mirror.errors import TypeMismatch
from site_mirror.references import Reference

__all__ = ("ContentKind", "ResourceStatus", "Resource", "ResourceGraph")

_HTML_EXTS = {".html", ".htm", ".xhtml", ".shtml"}
_GENERIC_TYPES = {"", "application/octet-stream", "text/plain", "binary/octet-stream"}


class ContentKind(str, Enum):
    HTML = "html"
    CSS = "css"
    BINARY = "binary"

    @property
    def is_textual(self) -> bool:
        return self is not ContentKind.BINARY

    @classmethod
    def from_path(cls, path: str) -> ContentKind:
        ext = posixpath.splitext(urlparse(path).path)[1].lower()
        if ext in _HTML_EXTS:
            return cls.HTML
        if ext == ".css":
            return cls.CSS
        return cls.BINARY

    @classmethod
    def from_response(cls, content_type: Optional[str], url: str) -> ContentKind:
        """Classify by MIME type, falling back to the URL extension."""
        mime = (content_type or "").split(";", 1)[0].strip().lower()
        if mime in ("text/html", "application/xhtml+xml"):
            return cls.HTML
        if mime == "text/css":
            return cls.CSS
        if mime in _GENERIC_TYPES:
            return cls.from_path(url)
        return cls.BINARY


class ResourceStatus(str, Enum):
    PENDING = "pending"
    FETCHED = "fetched"
    FILTERED = "filtered"
    FAILED = "failed"
    HANDLER_RUNNING = "handler_running"
    DONE = "done"

    @property
    def is_resolved(self) -> bool:
        """True once the resource has a local path and content."""
        return self in (ResourceStatus.FETCHED, ResourceStatus.HANDLER_RUNNING, ResourceStatus.DONE)


@dataclass(slots=True, eq=False)
class Resource:
    """Node of the crawl graph: identity, local path, content and links."""

    url: str
    local_path: Optional[str] = None
    kind: Optional[ContentKind] = None
    depth: int = 0
    id: int = -1
    status: ResourceStatus = ResourceStatus.PENDING
    redirected_url: Optional[str] = None
    content: Optional[bytes] = None
    encoding: Optional[str] = None
    error: Optional[str] = None
    parents: Set[int] = field(default_factory=set)
    children: List[int] = field(default_factory=list)
    _text: Optional[str] = field(default=None, init=False, repr=False)
    _source: Optional[str] = field(default=None, init=False, repr=False)
    _rewrites: Dict[Tuple[int, int], str] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.kind is None:
            guess = ContentKind.from_path(self.local_path) if self.local_path else ContentKind.BINARY
            self.kind = guess if guess is not ContentKind.BINARY else ContentKind.from_path(self.url)

    @property
    def base_url(self) -> str:
        """URL the resource's own references are resolved against."""
        return self.redirected_url or self.url

    # Text -------------------------------------------------------------------
    def get_text(self) -> str:
        self._require_text()
        return self._text or ""

    def set_text(self, text: str) -> None:
        self._require_text()
        self._text = text
        self._source = None
        self._rewrites.clear()

    def _require_text(self) -> None:
        if not self.kind.is_textual:
            raise TypeMismatch(f"{self.url} is {self.kind.value}, not a textual resource")

    # Graph ------------------------------------------------------------------
    def update_child(self, child: Resource, reference: Reference) -> int:
        """
        Rewrite every occurrence of *reference* to point at *child*.

        Substitutions are applied to the exact value spans reported by the
        extractor, against the text as it was when rewriting began. Spans
        that were already rewritten, or no longer hold the original value,
        are skipped. Returns the number of replacements performed.
        """
        if child.local_path is None:
            raise ValueError(f"child {child.url} has no local path")
        if self._source is None:
            self._source = self.get_text()
        target = self.path_to(child)
        replaced = 0
        for match in reference.matches:
            span = (match.value_start, match.value_end)
            if self._overlaps(span):
                continue
            if self._source[match.value_start : match.value_end] != match.literal:
                continue
            self._rewrites[span] = target
            replaced += 1
        if replaced:
            self._text = self._render()
        self.link(child)
        return replaced

    def remove_span(self, start: int, end: int) -> bool:
        """Drop ``text[start:end]`` from the output; spans use the same snapshot as :meth:`update_child`."""
        if self._source is None:
            self._source = self.get_text()
        if self._overlaps((start, end)):
            return False
        self._rewrites[(start, end)] = ""
        self._text = self._render()
        return True

    def _overlaps(self, span: Tuple[int, int]) -> bool:
        start, end = span
        return any(s < end and start < e for s, e in self._rewrites) or span in self._rewrites

    def path_to(self, child: Resource) -> str:
        """Path of *child* relative to the directory holding this resource."""
        if not self.local_path:
            return child.local_path or ""
        base_dir = posixpath.dirname(self.local_path) or "."
        return posixpath.relpath(child.local_path, base_dir)

    def link(self, child: Resource) -> None:
        if child.id not in self.children:
            self.children.append(child.id)
        child.parents.add(self.id)

    def _render(self) -> str:
        source = self._source or ""
        out: List[str] = []
        pos = 0
        for (start, end), value in sorted(self._rewrites.items()):
            out.append(source[pos:start])
            out.append(value)
            pos = end
        out.append(source[pos:])
        return "".join(out)


class ResourceGraph:
    """Arena of resources indexed by integer id, in discovery order."""

    def __init__(self) -> None:
        self._records: List[Resource] = []

    def add(self, resource: Resource) -> Resource:
        resource.id = len(self._records)
        self._records.append(resource)
        return resource

    def get(self, resource_id: int) -> Resource:
        return self._records[resource_id]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._records))

    def roots(self) -> List[Resource]:
        return [r for r in self._records if r.depth == 0]

    def children_of(self, resource: Resource) -> List[Resource]:
        return [self._records[i] for i in resource.children if 0 <= i < len(self._records)]

    def parents_of(self, resource: Resource) -> List[Resource]:
        return [self._records[i] for i in sorted(resource.parents) if 0 <= i < len(self._records)]
