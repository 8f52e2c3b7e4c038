# File: site_mirror/pipeline.py
"""site_mirror.pipeline: what happens to one fetched resource.

Classification picks the category, the artifact is written, and whatever
the body references is handed to the ``enqueue`` callable the caller
provides (normally :meth:`site_mirror.frontier.Frontier.enqueue`).
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from site_mirror.classifier import Category, classify
from site_mirror.crawler.models import CrawlStats, FetchResult
from site_mirror.errors import NonBinaryImagePayload, WriteError
from site_mirror.extractor import Discovery, HtmlMatch, extract
from site_mirror.frontier import EnqueueResult, Label
from site_mirror.logger import logger
from site_mirror.urls import derive_file_name
from site_mirror.writer import ArtifactWriter

__all__: Sequence[str] = ("EnqueueFn", "MirrorPipeline")

EnqueueFn = Callable[[str, Label], EnqueueResult]


class MirrorPipeline:
    """Classify, persist and extract for each :class:`FetchResult`."""

    def __init__(
        self,
        writer: ArtifactWriter,
        scope: str,
        html_match: HtmlMatch = HtmlMatch.LOOSE,
        stats: Optional[CrawlStats] = None,
    ) -> None:
        self.writer = writer
        self.scope = scope
        self.html_match = HtmlMatch(html_match)
        self.stats = stats if stats is not None else CrawlStats()

    async def handle(self, result: FetchResult, enqueue: EnqueueFn) -> Category:
        category = classify(result.request, result.headers, result.content_type)
        logger.debug("Classified %s as %s", result.url, category.value)

        if category.persistable:
            await self._persist(category, result)

        discoveries = self.discover(category, result)
        for item in discoveries:
            enqueue(item.url, item.label)
        self.stats.discovered += len(discoveries)
        return category

    def discover(self, category: Category, result: FetchResult) -> List[Discovery]:
        return extract(category, result.body, result.url, self.scope, self.html_match)

    async def _persist(self, category: Category, result: FetchResult) -> None:
        suffix = ".html" if category is Category.HTML else ""
        name = derive_file_name(result.url, default_suffix=suffix)
        try:
            await self.writer.persist(category, name, result.body, url=result.url)
        except NonBinaryImagePayload as exc:
            self.stats.skipped += 1
            logger.warning("Skipping image %s: response is not binary data", exc.url)
        except WriteError as exc:
            self.stats.skipped += 1
            logger.error("Failed to save %s %s: %s", category.value, result.url, exc)
        else:
            self.stats.record_saved(category.value)
