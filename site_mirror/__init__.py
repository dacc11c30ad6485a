# site_mirror/__init__.py
"""
site_mirror package initializer.
Defines package version and exposes the orchestrator and CLI.
"""
__version__ = "0.1.0"

from site_mirror.resource import ContentKind, Resource, ResourceGraph, ResourceStatus
from site_mirror.scraper import Scraper

# Expose CLI entry point; the submodule itself stays reachable as site_mirror.cli
from site_mirror.cli import cli as main_cli

__all__ = ["__version__", "ContentKind", "Resource", "ResourceGraph", "ResourceStatus", "Scraper", "main_cli"]
