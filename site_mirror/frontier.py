# File: site_mirror/frontier.py
"""site_mirror.frontier: the deduplicating, budgeted queue that drives a crawl.

Every method that touches the seen-set or the budget is synchronous, so on a
single event loop a check and the insertion that follows it can never be
interleaved with another worker.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Set

from site_mirror.logger import logger

__all__: Sequence[str] = ("Label", "Request", "EnqueueResult", "Frontier", "DEFAULT_BUDGET")

DEFAULT_BUDGET = 500


class Label(str, enum.Enum):
    """Advisory hint attached to a request by whoever discovered it."""

    HTML = "html"
    JS = "js"
    CSS = "css"
    IMAGE = "image"


@dataclass(frozen=True, slots=True)
class Request:
    """A pending fetch. Identity is ``url`` alone."""

    url: str
    label: Label = Label.HTML


class EnqueueResult(enum.Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    BUDGET_EXCEEDED = "budget-exceeded"


class Frontier:
    """FIFO of undispatched requests plus the set of every URL ever accepted."""

    def __init__(self, budget: int = DEFAULT_BUDGET) -> None:
        if budget < 1:
            raise ValueError("budget must be >= 1")
        self.budget = budget
        self._seen: Set[str] = set()
        self._queue: asyncio.Queue[Request] = asyncio.Queue()
        self._accepted = 0
        self._dispatched = 0
        self.duplicates = 0
        self.dropped = 0

    # ------------------------------------------------------------------ #
    # Mutations                                                           #
    # ------------------------------------------------------------------ #

    def enqueue(self, url: str, label: Label = Label.HTML) -> EnqueueResult:
        """Accept *url* unless it was seen before or the budget is spent.

        The duplicate check runs first, so a duplicate never costs budget.
        """
        if url in self._seen:
            self.duplicates += 1
            return EnqueueResult.DUPLICATE
        if self._accepted >= self.budget:
            self.dropped += 1
            logger.debug("Budget of %d requests reached, dropping %s", self.budget, url)
            return EnqueueResult.BUDGET_EXCEEDED
        self._seen.add(url)
        self._accepted += 1
        self._queue.put_nowait(Request(url, Label(label)))
        return EnqueueResult.ACCEPTED

    async def dequeue(self) -> Request:
        """Wait for the next request in discovery order."""
        request = await self._queue.get()
        self._dispatched += 1
        return request

    def dequeue_nowait(self) -> Optional[Request]:
        """Return the next request, or ``None`` if nothing is waiting."""
        try:
            request = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        self._dispatched += 1
        return request

    def task_done(self) -> None:
        """Mark a dequeued request as fully processed."""
        self._queue.task_done()

    async def join(self) -> None:
        """Block until every accepted request has been processed."""
        await self._queue.join()

    # ------------------------------------------------------------------ #
    # Introspection                                                       #
    # ------------------------------------------------------------------ #

    def remaining_budget(self) -> int:
        return self.budget - self._accepted

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def __contains__(self, url: object) -> bool:
        return url in self._seen
