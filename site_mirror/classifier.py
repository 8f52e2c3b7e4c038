# File: site_mirror/classifier.py
"""site_mirror.classifier: decide what a fetched resource is."""

from __future__ import annotations

import enum
import posixpath
from typing import Mapping, Optional, Sequence
from urllib.parse import urlsplit

from site_mirror.crawler.models import header_value
from site_mirror.frontier import Request

__all__: Sequence[str] = ("Category", "classify", "suffix_category", "content_type_category")


class Category(str, enum.Enum):
    HTML = "html"
    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    IMAGE = "image"
    UNKNOWN = "unknown"

    @property
    def persistable(self) -> bool:
        return self is not Category.UNKNOWN


_SUFFIXES = {
    ".html": Category.HTML,
    ".htm": Category.HTML,
    ".js": Category.SCRIPT,
    ".mjs": Category.SCRIPT,
    ".css": Category.STYLESHEET,
    ".scss": Category.STYLESHEET,
    ".jpg": Category.IMAGE,
    ".jpeg": Category.IMAGE,
    ".png": Category.IMAGE,
    ".gif": Category.IMAGE,
    ".webp": Category.IMAGE,
    ".svg": Category.IMAGE,
    ".ico": Category.IMAGE,
    ".bmp": Category.IMAGE,
    ".avif": Category.IMAGE,
}

_MARKUP_TYPES = ("text/html", "application/xhtml+xml")


def suffix_category(url: str) -> Optional[Category]:
    """Category implied by the URL path suffix (query ignored), if any."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return None
    return _SUFFIXES.get(posixpath.splitext(path)[1].lower())


def content_type_category(content_type: Optional[str]) -> Optional[Category]:
    """Category implied by a ``Content-Type`` value, if any."""
    if not content_type:
        return None
    ctype = content_type.lower()
    if any(m in ctype for m in _MARKUP_TYPES):
        return Category.HTML
    if "javascript" in ctype or "ecmascript" in ctype:
        return Category.SCRIPT
    if "css" in ctype:
        return Category.STYLESHEET
    if "image/" in ctype:
        return Category.IMAGE
    return None


def classify(
    request: Request,
    headers: Optional[Mapping[str, str]] = None,
    content_type: Optional[str] = None,
) -> Category:
    """Classify a fetched resource from its URL and declared content type.

    The request label is only a hint and does not take part. A markup
    content type wins over any suffix so mislabelled pages still get their
    links extracted; otherwise the suffix wins and the content type is the
    fallback.
    """
    if content_type is None and headers:
        content_type = header_value(headers, "content-type")

    by_type = content_type_category(content_type)
    if by_type is Category.HTML:
        return Category.HTML

    by_suffix = suffix_category(request.url)
    if by_suffix is not None:
        return by_suffix
    return by_type or Category.UNKNOWN
