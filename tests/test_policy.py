# File: tests/test_policy.py
"""Admission policy: scheme, depth, origin and include/exclude rules."""
from site_mirror.crawler.policy import AdmissionPolicy


def test_accepts_everything_http_by_default():
    policy = AdmissionPolicy()
    assert policy.should_follow("http://anywhere.org/a.png", depth=10)
    assert not policy.should_follow("ftp://anywhere.org/a.png", depth=0)


def test_depth_limit():
    policy = AdmissionPolicy(max_depth=1)
    assert policy.should_follow("http://example.com/a.css", depth=1)
    assert not policy.should_follow("http://example.com/b.css", depth=2)


def test_same_origin_applies_to_discovered_urls_only():
    policy = AdmissionPolicy(["http://example.com/"], same_origin_only=True)
    assert policy.should_follow("http://other.org/", depth=0)
    assert policy.should_follow("http://example.com/x.png", depth=1, parent_url="http://example.com/")
    assert not policy.should_follow("http://cdn.other.org/x.png", depth=1, parent_url="http://example.com/")


def test_include_exclude():
    policy = AdmissionPolicy(include=r"example\.com", exclude=r"\.mp4$")
    assert policy.should_follow("http://example.com/a.png", depth=0)
    assert not policy.should_follow("http://example.com/movie.mp4", depth=0)
    assert not policy.should_follow("http://other.org/a.png", depth=0)


def test_from_config(basic_config):
    cfg = basic_config.model_copy(update={"max_depth": 0, "same_origin_only": True})
    policy = AdmissionPolicy.from_config(cfg)
    assert policy.seeds == ["http://example.com/"]
    assert not policy.should_follow("http://example.com/a.png", depth=1, parent_url="http://example.com/")
