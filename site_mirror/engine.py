# File: site_mirror/engine.py
"""site_mirror.engine: запуск зеркалирования по конфигу и сохранение результата."""

from __future__ import annotations

from typing import Any, Optional

from site_mirror.aggregator import MirrorReport, summarize
from site_mirror.config import MirrorConfig
from site_mirror.crawler.fetcher import HttpTransport, Transport
from site_mirror.logger import logger
from site_mirror.scraper import Scraper
from site_mirror.storage import prepare_directory, save_resources

__all__ = ["start_mirror"]


async def start_mirror(cfg: MirrorConfig, transport: Optional[Transport] = None, **kwargs: Any) -> MirrorReport:
    """
    Зеркалирует cfg.urls в cfg.directory и возвращает MirrorReport.

    Parameters
    ----------
    cfg : MirrorConfig
        Конфигурация зеркалирования.
    transport : Transport, optional
        Готовый транспорт; по умолчанию HttpTransport по cfg.
    kwargs
        Передаются в Scraper (например, ``on_error``).
    """
    directory = prepare_directory(cfg.directory, overwrite=cfg.overwrite)
    if transport is None:
        async with HttpTransport(cfg) as http:
            scraper = Scraper.from_config(cfg, http, **kwargs)
            await scraper.scrape(cfg.seed_urls)
    else:
        scraper = Scraper.from_config(cfg, transport, **kwargs)
        await scraper.scrape(cfg.seed_urls)

    save_resources(scraper.graph, directory)
    report = summarize(scraper.graph, cfg.seed_urls)
    if report.failed:
        logger.warning("Не удалось загрузить ресурсов: %d", len(report.failed))
    return report
