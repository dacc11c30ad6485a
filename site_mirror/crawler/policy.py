# site_mirror/crawler/policy.py
"""
Admission policy: decides whether a discovered URL should be followed.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Optional, Pattern

from site_mirror.urls import is_http_url, same_origin

__all__ = ("AdmissionPolicy",)


class AdmissionPolicy:
    """Depth limit, origin restriction and include/exclude patterns."""

    def __init__(
        self,
        seeds: Iterable[str] = (),
        *,
        max_depth: Optional[int] = None,
        same_origin_only: bool = False,
        include: Optional[str] = None,
        exclude: Optional[str] = None,
    ) -> None:
        self.seeds = list(seeds)
        self.max_depth = max_depth
        self.same_origin_only = same_origin_only
        self._include: Optional[Pattern[str]] = re.compile(include) if include else None
        self._exclude: Optional[Pattern[str]] = re.compile(exclude) if exclude else None

    @classmethod
    def from_config(cls, config: Any) -> AdmissionPolicy:
        return cls(
            config.seed_urls,
            max_depth=config.max_depth,
            same_origin_only=config.same_origin_only,
            include=config.include,
            exclude=config.exclude,
        )

    def should_follow(self, url: str, depth: int, parent_url: Optional[str] = None) -> bool:
        if not is_http_url(url):
            return False
        if self.max_depth is not None and depth > self.max_depth:
            return False
        if parent_url is not None and self.same_origin_only and self.seeds:
            if not any(same_origin(seed, url) for seed in self.seeds):
                return False
        if self._include and not self._include.search(url):
            return False
        if self._exclude and self._exclude.search(url):
            return False
        return True
