# site_mirror/cache.py
"""
Session-scoped dedup cache: normalized URL -> resolution outcome.

:meth:`DedupCache.claim` is the only critical section of a crawl. It runs
without awaiting, so within one event loop the check for an existing entry
and the insertion of a new Pending entry happen as a single step.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple

from site_mirror.resource import Resource

__all__ = ("CacheEntry", "DedupCache")


@dataclass(slots=True)
class CacheEntry:
    """A resource record and the future that settles when it is resolved."""

    resource: Resource
    outcome: asyncio.Future

    @property
    def settled(self) -> bool:
        return self.outcome.done()

    def settle(self, result: Optional[Resource]) -> None:
        if not self.outcome.done():
            self.outcome.set_result(result)

    async def wait(self) -> Optional[Resource]:
        # shield: a cancelled waiter must not cancel the shared outcome
        return await asyncio.shield(self.outcome)


class DedupCache:
    """Maps each normalized URL to exactly one :class:`CacheEntry`."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def claim(self, url: str, factory: Callable[[str], Resource]) -> Tuple[CacheEntry, bool]:
        """
        Return the entry for *url*, creating a Pending one if absent.

        The boolean is True only for the caller that created the entry;
        that caller alone is responsible for resolving it.
        """
        entry = self._entries.get(url)
        if entry is not None:
            return entry, False
        loop = asyncio.get_running_loop()
        entry = CacheEntry(resource=factory(url), outcome=loop.create_future())
        self._entries[url] = entry
        return entry, True

    def get(self, url: str) -> Optional[CacheEntry]:
        return self._entries.get(url)

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
