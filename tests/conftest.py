# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pytest

from site_mirror.config import MirrorConfig
from site_mirror.crawler.models import FetchResult
from site_mirror.errors import TransportFailure

Route = Union[BaseException, Tuple[Union[str, bytes], str], Tuple[Union[str, bytes], str, str]]


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class FakeTransport:
    """In-memory transport: routes map normalized URL -> (body, content type[, final url])."""

    def __init__(self, routes: Dict[str, Route], delay: float = 0.0) -> None:
        self.routes = routes
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            route = self.routes.get(url)
            if route is None:
                raise TransportFailure(url, "Not Found", 404)
            if isinstance(route, BaseException):
                raise route
            body, content_type = route[0], route[1]
            final_url: Optional[str] = route[2] if len(route) > 2 else None
            if isinstance(body, str):
                body = body.encode("utf-8")
            charset = content_type.partition("charset=")[2].strip() or None
            return FetchResult(url=url, body=body, content_type=content_type, charset=charset, final_url=final_url)
        finally:
            self.in_flight -= 1

    def count(self, url: str) -> int:
        return self.calls.count(url)


@pytest.fixture()
def make_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture()
def basic_config(tmp_path: Path) -> MirrorConfig:
    """
    Return a basic valid MirrorConfig writing into a temporary directory.
    """
    return MirrorConfig(
        urls=["http://example.com/"],
        directory=tmp_path / "mirror",
        timeout=2.0,
        user_agent="TestAgent/1.0",
        rate_limit=100.0,
        retry_times=0,
    )
