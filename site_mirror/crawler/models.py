# site_mirror/crawler/models.py
"""
Data models for the SiteMirror crawler.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, Mapping, Optional, Union

from site_mirror.frontier import Request

Body = Union[bytes, str]


@dataclass(slots=True)
class Response:
    """What a transport hands back for one URL."""

    status: int
    headers: Mapping[str, str]
    body: Body


@dataclass(slots=True)
class FetchResult:
    """A response bound to the request that produced it."""

    request: Request
    status: int
    headers: Mapping[str, str]
    body: Body
    content_type: Optional[str] = None

    @classmethod
    def from_response(cls, request: Request, response: Response) -> FetchResult:
        return cls(
            request=request,
            status=response.status,
            headers=response.headers,
            body=response.body,
            content_type=header_value(response.headers, "content-type"),
        )

    @property
    def url(self) -> str:
        return self.request.url


def header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


@dataclass(slots=True)
class CrawlStats:
    """Counters reported when a crawl reaches its terminal state."""

    seed_url: str = ""
    dispatched: int = 0
    fetched: int = 0
    failed: int = 0
    skipped: int = 0
    discovered: int = 0
    duplicates: int = 0
    dropped: int = 0
    saved: Dict[str, int] = field(default_factory=dict)
    duration: float = 0.0

    @property
    def total_saved(self) -> int:
        return sum(self.saved.values())

    def record_saved(self, category: str) -> None:
        self.saved[category] = self.saved.get(category, 0) + 1

    def json(self, *, pretty: bool = False) -> str:
        data = asdict(self)
        data["total_saved"] = self.total_saved
        return json.dumps(data, ensure_ascii=False, indent=2 if pretty else None)

    def summary(self) -> str:
        return (
            f"Mirror complete: {self.dispatched} requests, {self.total_saved} artifacts saved, "
            f"{self.failed} failed, {self.skipped} skipped in {self.duration:.2f} s"
        )
