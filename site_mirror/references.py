# site_mirror/references.py
"""
Reference records produced by the per-content-type extractors.

An extractor reports every occurrence it finds as a :class:`ReferenceMatch`
carrying the exact span of the whole token and of the URL value inside it.
Occurrences sharing the same raw value are grouped into one
:class:`Reference`, which is what the orchestrator resolves and what
:meth:`site_mirror.resource.Resource.update_child` rewrites.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple

__all__: Sequence[str] = (
    "Delimiter",
    "ReferenceForm",
    "ReferenceMatch",
    "Reference",
    "group_references",
    "is_fetchable",
)

_SKIP_PREFIXES = ("#", "data:", "blob:", "javascript:", "about:", "mailto:", "tel:")


class Delimiter(str, Enum):
    """How the URL value is delimited in the source text."""

    NONE = ""
    SINGLE = "'"
    DOUBLE = '"'

    @classmethod
    def from_quote(cls, quote: str | None) -> Delimiter:
        return cls(quote or "")


class ReferenceForm(str, Enum):
    IMPORT = "import"
    URL = "url"
    ATTRIBUTE = "attribute"
    SRCSET = "srcset"


@dataclass(frozen=True, slots=True)
class ReferenceMatch:
    """One occurrence of a reference in a resource's text."""

    raw: str
    text: str
    delimiter: Delimiter
    form: ReferenceForm
    start: int
    end: int
    value_start: int
    value_end: int

    @property
    def literal(self) -> str:
        """The value exactly as written in the source."""
        return self.text[self.value_start - self.start : self.value_end - self.start]

    def shifted(self, offset: int) -> ReferenceMatch:
        return ReferenceMatch(
            raw=self.raw,
            text=self.text,
            delimiter=self.delimiter,
            form=self.form,
            start=self.start + offset,
            end=self.end + offset,
            value_start=self.value_start + offset,
            value_end=self.value_end + offset,
        )


@dataclass(frozen=True, slots=True)
class Reference:
    """A distinct reference and all of its occurrences, in source order."""

    raw: str
    matches: Tuple[ReferenceMatch, ...]

    def __len__(self) -> int:
        return len(self.matches)


def is_fetchable(raw: str) -> bool:
    """False for empty values, fragments and schemes that never hit the network."""
    value = raw.strip()
    if not value:
        return False
    return not value.lower().startswith(_SKIP_PREFIXES)


def group_references(matches: Iterable[ReferenceMatch]) -> List[Reference]:
    """Group occurrences by raw value, keeping first-occurrence order."""
    grouped: Dict[str, List[ReferenceMatch]] = {}
    for match in sorted(matches, key=lambda m: (m.start, m.value_start)):
        grouped.setdefault(match.raw, []).append(match)
    return [Reference(raw, tuple(items)) for raw, items in grouped.items()]
