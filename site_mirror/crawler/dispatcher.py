# === FILE: site_mirror/crawler/dispatcher.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional

from site_mirror.config import MirrorConfig
from site_mirror.crawler.models import CrawlStats, FetchResult
from site_mirror.crawler.transport import HttpTransport, Transport
from site_mirror.errors import TransportFailure
from site_mirror.frontier import Frontier, Label
from site_mirror.logger import LOGGER_NAME
from site_mirror.pipeline import MirrorPipeline
from site_mirror.urls import hostname, validate_seed
from site_mirror.writer import ArtifactWriter

__all__ = ("MirrorCrawler",)


class MirrorCrawler:
    """Asynchronous site mirror: a fixed pool of workers over one frontier.

    The crawl ends once every accepted request has been processed; a failed
    fetch or write only costs that one request.
    """

    def __init__(
        self,
        config: MirrorConfig,
        transport: Optional[Transport] = None,
        writer: Optional[ArtifactWriter] = None,
    ) -> None:
        self.config = config
        self.seed = validate_seed(config.seed_url)
        self.scope = hostname(self.seed)
        self.frontier = Frontier(budget=config.max_requests)
        self.writer = writer or ArtifactWriter(config.output_dir, config.on_collision)
        self.stats = CrawlStats(seed_url=self.seed)
        self.pipeline = MirrorPipeline(self.writer, self.scope, config.html_match, self.stats)
        self.transport: Optional[Transport] = transport
        self._owned_transport: Optional[HttpTransport] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> MirrorCrawler:
        if self.transport is None:
            self._owned_transport = HttpTransport(self.config)
            self.transport = await self._owned_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owned_transport is not None:
            await self._owned_transport.close()

    async def crawl(self) -> CrawlStats:
        if self.transport is None:
            raise RuntimeError("Transport not initialized")
        self.logger.info("Mirror started: %s (scope %s)", self.seed, self.scope)
        start = time.monotonic()

        self.writer.prepare()
        self.frontier.enqueue(self.seed, Label.HTML)
        workers: List[asyncio.Task[None]] = [
            asyncio.create_task(self._worker(i), name=f"worker-{i}") for i in range(self.config.concurrency)
        ]
        try:
            await self.frontier.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        self.stats.dispatched = self.frontier.dispatched
        self.stats.duplicates = self.frontier.duplicates
        self.stats.dropped = self.frontier.dropped
        self.stats.duration = time.monotonic() - start
        if self.stats.dropped:
            self.logger.info(
                "Request budget of %d reached, %d URLs not fetched",
                self.frontier.budget,
                self.stats.dropped,
            )
        self.logger.info("Mirror finished: %s", self.stats.summary())
        return self.stats

    async def _worker(self, index: int) -> None:
        while True:
            request = await self.frontier.dequeue()
            try:
                self.logger.info("Processing: %s", request.url)
                try:
                    response = await self.transport.fetch(request.url)  # type: ignore[union-attr]
                except TransportFailure as exc:
                    self.stats.failed += 1
                    self.logger.error("Request failed %s: %s", request.url, exc.message)
                    continue
                self.stats.fetched += 1
                result = FetchResult.from_response(request, response)
                await self.pipeline.handle(result, self.frontier.enqueue)
            except asyncio.CancelledError:
                raise
            except Exception:
                self.stats.failed += 1
                self.logger.exception("Worker %d failed on %s", index, request.url)
            finally:
                self.frontier.task_done()

