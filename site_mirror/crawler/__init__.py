# site_mirror/crawler/__init__.py
"""Collaborators consumed by the orchestrator: transport, filenames, admission policy."""
from site_mirror.crawler.fetcher import HttpTransport, Transport
from site_mirror.crawler.filenames import FilenameStrategy
from site_mirror.crawler.models import FetchResult
from site_mirror.crawler.policy import AdmissionPolicy

__all__ = ["AdmissionPolicy", "FetchResult", "FilenameStrategy", "HttpTransport", "Transport"]
