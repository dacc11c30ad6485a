# === FILE: site_mirror/scraper.py ===
"""
Orchestrator: the fetch-resolve-recurse loop over the resource graph.

:meth:`Scraper.request_resource` resolves one reference to a resource,
fetching each normalized URL at most once per session.
:meth:`Scraper.load_resource` runs the resource's handler, requests all of
its references concurrently and rewrites its text as they settle.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Iterable, List, Optional

from site_mirror.cache import CacheEntry, DedupCache
from site_mirror.crawler.fetcher import Transport
from site_mirror.crawler.filenames import FilenameStrategy
from site_mirror.crawler.policy import AdmissionPolicy
from site_mirror.errors import FilteredByPolicy, TransportFailure, UnsupportedType
from site_mirror.handlers import HandlerRegistry
from site_mirror.logger import logger
from site_mirror.references import Reference
from site_mirror.resource import ContentKind, Resource, ResourceGraph, ResourceStatus
from site_mirror.urls import normalize_url, resolve_url

__all__ = ("Scraper", "ErrorObserver")

ErrorObserver = Callable[[Resource, BaseException], None]


class Scraper:
    """One crawl session: dedup cache, resource graph and collaborators."""

    def __init__(
        self,
        transport: Transport,
        *,
        filenames: Optional[FilenameStrategy] = None,
        policy: Optional[AdmissionPolicy] = None,
        handlers: Optional[HandlerRegistry] = None,
        on_error: Optional[ErrorObserver] = None,
    ) -> None:
        self.transport = transport
        self.filenames = filenames or FilenameStrategy()
        self.policy = policy or AdmissionPolicy()
        self.handlers = handlers or HandlerRegistry()
        self.on_error = on_error
        self.cache = DedupCache()
        self.graph = ResourceGraph()
        self.logger = logger

    @classmethod
    def from_config(cls, config: Any, transport: Transport, **kwargs: Any) -> Scraper:
        return cls(
            transport,
            filenames=FilenameStrategy(config.subdirectories, config.default_filename),
            policy=AdmissionPolicy.from_config(config),
            handlers=HandlerRegistry.from_config(config),
            **kwargs,
        )

    async def scrape(self, urls: Iterable[str]) -> List[Optional[Resource]]:
        """Mirror every seed URL concurrently; returns the seed resources."""
        seeds = list(urls)
        self.logger.info("Старт зеркалирования: %s", ", ".join(seeds))
        start = time.monotonic()
        roots = await asyncio.gather(*(self.request_resource(url) for url in seeds))
        duration = time.monotonic() - start
        resolved = sum(1 for r in self.graph if r.status.is_resolved)
        self.logger.info(
            "Завершено: %d ресурсов из %d за %.2f с", resolved, len(self.graph), duration
        )
        return list(roots)

    async def request_resource(self, url: str, parent: Optional[Resource] = None) -> Optional[Resource]:
        """
        Resolve *url* (relative to *parent*) to a resource.

        Returns None when the URL is filtered by the admission policy or
        cannot be fetched. A URL already known to the session is never
        fetched again: the caller gets the cached outcome, waiting for it
        if the first fetch is still in flight.
        """
        try:
            absolute = resolve_url(parent.base_url if parent is not None else None, url)
        except ValueError as exc:
            self.logger.debug("Skipping %r: %s", url, exc)
            return None
        depth = parent.depth + 1 if parent is not None else 0

        entry, created = self.cache.claim(absolute, lambda u: self.graph.add(Resource(u, depth=depth)))
        if not created:
            self.logger.debug("Cache hit for %s (%s)", absolute, entry.resource.status.value)
            return await entry.wait()

        resource = entry.resource
        try:
            await self._fetch(resource, parent)
        except FilteredByPolicy as exc:
            self._reject(entry, ResourceStatus.FILTERED, exc)
            return None
        except TransportFailure as exc:
            self._reject(entry, ResourceStatus.FAILED, exc)
            return None
        except Exception as exc:
            self.logger.exception("Unexpected error fetching %s", absolute)
            self._reject(entry, ResourceStatus.FAILED, exc)
            return None
        except asyncio.CancelledError:
            entry.settle(None)
            raise

        # waiters (duplicates, cycles) only need the local path, not the subtree
        entry.settle(resource)
        return await self.load_resource(resource)

    async def load_resource(self, resource: Resource) -> Resource:
        """
        Run the handler for *resource* and rewrite its references.

        Completes only after every reference has settled. A reference that
        resolves to None or raises leaves its original text in place.
        """
        try:
            handler = self.handlers.handler_for(resource.kind)
        except UnsupportedType:
            return resource

        resource.status = ResourceStatus.HANDLER_RUNNING
        try:
            base = handler.base_url(resource)
            references = handler.references(resource)
            handler.detach_base(resource)
        except Exception:
            self.logger.exception("Could not extract references from %s", resource.url)
            resource.status = ResourceStatus.DONE
            return resource

        if references:
            self.logger.debug("%s: %d reference(s)", resource.url, len(references))
            tasks = [asyncio.create_task(self._load_reference(resource, base, ref)) for ref in references]
            await asyncio.gather(*tasks)
        resource.status = ResourceStatus.DONE
        return resource

    async def _load_reference(self, resource: Resource, base: str, reference: Reference) -> Optional[Resource]:
        try:
            url = resolve_url(base, reference.raw)
        except ValueError as exc:
            self.logger.debug("Skipping %r in %s: %s", reference.raw, resource.url, exc)
            return None
        try:
            child = await self.request_resource(url, resource)
            if child is not None:
                resource.update_child(child, reference)
        except Exception as exc:
            self.logger.warning("Reference %s in %s failed: %s", url, resource.url, exc)
            return None
        return child

    async def _fetch(self, resource: Resource, parent: Optional[Resource]) -> None:
        parent_url = parent.url if parent is not None else None
        if not self.policy.should_follow(resource.url, resource.depth, parent_url):
            raise FilteredByPolicy(resource.url)

        result = await self.transport.fetch(resource.url)
        final_url = result.final_url or resource.url
        if normalize_url(final_url) != resource.url:
            resource.redirected_url = final_url
        resource.kind = ContentKind.from_response(result.content_type, final_url)
        if resource.kind.is_textual:
            text, resource.encoding = result.decode(is_html=resource.kind is ContentKind.HTML)
            resource.set_text(text)
        else:
            resource.content = result.body
        resource.local_path = self.filenames.assign(resource.url, resource.kind, result.content_type)
        resource.status = ResourceStatus.FETCHED
        self.logger.debug("Fetched %s -> %s", resource.url, resource.local_path)

    def _reject(self, entry: CacheEntry, status: ResourceStatus, exc: BaseException) -> None:
        resource = entry.resource
        if resource.status is ResourceStatus.PENDING:
            resource.status = status
            resource.error = str(exc)
        entry.settle(None)
        if status is ResourceStatus.FILTERED:
            self.logger.debug("Filtered %s", resource.url)
            return
        self.logger.warning("Failed %s: %s", resource.url, exc)
        if self.on_error is not None:
            try:
                self.on_error(resource, exc)
            except Exception:
                self.logger.exception("Error observer raised for %s", resource.url)
