# site_mirror/handlers/__init__.py
"""
Handler registry: a static table from :class:`ContentKind` to handler type.

Kinds absent from the table (binary data) have no handler and are leaves
of the crawl graph.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Type

from site_mirror.errors import UnsupportedType
from site_mirror.handlers.base import Handler
from site_mirror.handlers.css import CssHandler, extract_css_references
from site_mirror.handlers.html import DEFAULT_SOURCES, RECURSIVE_SOURCES, HtmlHandler, Source
from site_mirror.resource import ContentKind

__all__ = [
    "Handler",
    "CssHandler",
    "HtmlHandler",
    "Source",
    "DEFAULT_SOURCES",
    "RECURSIVE_SOURCES",
    "HANDLER_TYPES",
    "HandlerRegistry",
    "extract_css_references",
]

HANDLER_TYPES: Mapping[ContentKind, Type[Handler]] = MappingProxyType(
    {
        ContentKind.CSS: CssHandler,
        ContentKind.HTML: HtmlHandler,
    }
)


class HandlerRegistry:
    """Handler instances for one crawl session, keyed by content kind."""

    def __init__(self, handlers: Optional[Mapping[ContentKind, Handler]] = None) -> None:
        if handlers is None:
            handlers = {kind: cls() for kind, cls in HANDLER_TYPES.items()}
        self._handlers: Dict[ContentKind, Handler] = dict(handlers)

    @classmethod
    def from_config(cls, config: Any) -> HandlerRegistry:
        """Build handlers from a :class:`~site_mirror.config.MirrorConfig`."""
        sources: list[Source] = [Source(rule.selector, rule.attr) for rule in config.sources]
        if config.recursive:
            sources.extend(s for s in RECURSIVE_SOURCES if s not in sources)
        return cls(
            {
                ContentKind.CSS: CssHandler(),
                ContentKind.HTML: HtmlHandler(sources, inline_css=config.inline_css),
            }
        )

    def handler_for(self, kind: ContentKind) -> Handler:
        try:
            return self._handlers[kind]
        except KeyError:
            raise UnsupportedType(kind) from None

    def __contains__(self, kind: object) -> bool:
        return kind in self._handlers

    def kinds(self) -> Sequence[ContentKind]:
        return tuple(self._handlers)
