# File: site_mirror/engine.py
"""site_mirror.engine: entry point that runs a whole mirror from a config."""

from __future__ import annotations

from typing import Optional

from site_mirror.config import MirrorConfig
from site_mirror.crawler.dispatcher import MirrorCrawler
from site_mirror.crawler.models import CrawlStats
from site_mirror.crawler.transport import Transport

__all__ = ["start_mirror"]


async def start_mirror(cfg: MirrorConfig, transport: Optional[Transport] = None) -> CrawlStats:
    """
    Run the crawler inside its context and return the final counters.

    Parameters
    ----------
    cfg : MirrorConfig
        Mirror configuration.
    transport : Transport, optional
        Replacement for the default aiohttp transport.
    """
    async with MirrorCrawler(cfg, transport=transport) as crawler:
        return await crawler.crawl()
