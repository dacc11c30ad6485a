# site_mirror/handlers/base.py
"""Base class shared by the per-content-type reference handlers."""
from __future__ import annotations

from typing import ClassVar, List

from site_mirror.references import Reference, ReferenceMatch, group_references
from site_mirror.resource import ContentKind, Resource


class Handler:
    """Extracts references from a textual resource."""

    kind: ClassVar[ContentKind]

    def extract(self, resource: Resource) -> List[ReferenceMatch]:
        """Every reference occurrence in *resource*'s text, in source order."""
        raise NotImplementedError

    def base_url(self, resource: Resource) -> str:
        return resource.base_url

    def references(self, resource: Resource) -> List[Reference]:
        return group_references(self.extract(resource))

    def detach_base(self, resource: Resource) -> int:
        """Drop document-level base declarations once references are extracted."""
        return 0
