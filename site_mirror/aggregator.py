# File: site_mirror/aggregator.py
"""site_mirror.aggregator: сводка по графу ресурсов для отчётов."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from site_mirror.resource import Resource, ResourceStatus


@dataclass
class ResourceEntry:
    """Одна строка отчёта: URL, локальный путь и итоговый статус."""

    url: str
    local_path: Optional[str]
    kind: str
    status: str
    depth: int
    parents: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class MirrorReport:
    """Итог зеркалирования."""

    seeds: List[str]
    entries: List[ResourceEntry] = field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        counter = Counter(e.status for e in self.entries)
        return {status.value: counter.get(status.value, 0) for status in ResourceStatus}

    @property
    def saved(self) -> List[ResourceEntry]:
        return [e for e in self.entries if e.local_path]

    @property
    def failed(self) -> List[ResourceEntry]:
        return [e for e in self.entries if e.status == ResourceStatus.FAILED.value]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seeds": self.seeds,
            "counts": self.counts,
            "resources": [asdict(e) for e in self.entries],
        }


def summarize(resources: Iterable[Resource], seeds: Iterable[str] = ()) -> MirrorReport:
    """Строит MirrorReport по ресурсам графа (в порядке обнаружения)."""
    records = list(resources)
    by_id = {r.id: r for r in records}
    entries = [
        ResourceEntry(
            url=r.url,
            local_path=r.local_path if r.status.is_resolved else None,
            kind=r.kind.value,
            status=r.status.value,
            depth=r.depth,
            parents=[by_id[p].url for p in sorted(r.parents) if p in by_id],
            error=r.error,
        )
        for r in records
    ]
    return MirrorReport(seeds=list(seeds), entries=entries)


__all__ = ["ResourceEntry", "MirrorReport", "summarize"]
