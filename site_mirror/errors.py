# File: site_mirror/errors.py
"""site_mirror.errors: исключения, которыми обмениваются оркестратор и его коллабораторы."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "MirrorError",
    "FilteredByPolicy",
    "TransportFailure",
    "UnsupportedType",
    "TypeMismatch",
]


class MirrorError(Exception):
    """Base class for all site_mirror errors."""


class FilteredByPolicy(MirrorError):
    """The admission policy refused to follow a URL. Not a failure."""

    def __init__(self, url: str) -> None:
        super().__init__(f"filtered by admission policy: {url}")
        self.url = url


class TransportFailure(MirrorError):
    """Fetching a URL failed at the transport level."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        message = f"{url}: {reason}" if status is None else f"{url}: HTTP {status} {reason}"
        super().__init__(message)
        self.url = url
        self.reason = reason
        self.status = status


class UnsupportedType(MirrorError):
    """No handler is registered for a content kind; the resource is a leaf."""

    def __init__(self, kind: object) -> None:
        super().__init__(f"no handler registered for {kind}")
        self.kind = kind


class TypeMismatch(MirrorError, TypeError):
    """A text operation was attempted on a non-textual resource."""
