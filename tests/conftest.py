# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Dict, List, Union

import pytest

from site_mirror.config import MirrorConfig
from site_mirror.crawler.models import Response
from site_mirror.errors import TransportFailure


class FakeTransport:
    """In-memory transport: maps URL -> Response, exception, or nothing (404)."""

    def __init__(self, routes: Dict[str, Union[Response, Exception]], delay: float = 0.0) -> None:
        self.routes = routes
        self.delay = delay
        self.calls: List[str] = []

    async def fetch(self, url: str) -> Response:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        route = self.routes.get(url)
        if route is None:
            raise TransportFailure(url, "HTTP 404", status=404)
        if isinstance(route, Exception):
            raise route
        return route


def html(body: str) -> Response:
    return Response(200, {"Content-Type": "text/html; charset=utf-8"}, body.encode("utf-8"))


def css(body: str) -> Response:
    return Response(200, {"Content-Type": "text/css"}, body.encode("utf-8"))


def js(body: str = "console.log(1);") -> Response:
    return Response(200, {"Content-Type": "application/javascript"}, body.encode("utf-8"))


def png(data: bytes = b"\x89PNG\r\n\x1a\n") -> Response:
    return Response(200, {"Content-Type": "image/png"}, data)


@pytest.fixture()
def output_dir(tmp_path) -> Path:
    """Fresh mirror root for each test."""
    return tmp_path / "mirror"


@pytest.fixture()
def basic_config(output_dir) -> MirrorConfig:
    """
    Return a basic valid MirrorConfig for crawler tests.
    """
    return MirrorConfig(
        seed_url="https://ex.com/index.html",
        output_dir=output_dir,
        max_requests=50,
        concurrency=4,
        timeout=2.0,
        user_agent="TestAgent/1.0",
        retry_times=0,
        retry_backoff=0,
    )
