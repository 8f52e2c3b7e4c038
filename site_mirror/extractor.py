# File: site_mirror/extractor.py
"""
Resource discovery for SiteMirror.

:func:`extract` turns one classified body into the references it embeds:

* pages – ``script[src]``, ``link[rel=stylesheet][href]``, ``img[src]``,
  ``url(...)`` inside ``<style>`` blocks and ``style`` attributes, and
  same-host anchors that look like HTML pages;
* stylesheets – every ``url(...)``, resolved against the stylesheet itself.

Nothing here keeps state between calls.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_mirror.classifier import Category
from site_mirror.errors import NormalizationError
from site_mirror.frontier import Label
from site_mirror.logger import logger
from site_mirror.urls import hostname, normalize

__all__: Sequence[str] = (
    "Discovery",
    "HtmlMatch",
    "extract",
    "extract_html",
    "extract_css",
    "extract_style_urls",
    "is_html_like",
)

_IGNORED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")
_HTML_SUFFIXES = (".html", ".htm")


class HtmlMatch(str, enum.Enum):
    """How an anchor is judged to point at an HTML page."""

    STRICT = "strict"
    LOOSE = "loose"


@dataclass(frozen=True, slots=True)
class Discovery:
    url: str
    label: Label


# --------------------------------------------------------------------------- #
# url(...) scanner                                                            #
# --------------------------------------------------------------------------- #


def extract_style_urls(text: str) -> List[str]:
    """Return the raw arguments of every ``url(...)`` token in *text*.

    Rules: the opener ``url(`` is case-insensitive; whitespace after it is
    skipped. A quoted argument runs to the matching ``'`` or ``"``, an
    unquoted one runs to the first ``)``. Whitespace may precede the closing
    ``)``. Arguments are trimmed; empty or unterminated tokens are dropped.
    """
    found: List[str] = []
    lower = text.lower()
    size = len(text)
    pos = 0
    while True:
        start = lower.find("url(", pos)
        if start < 0:
            return found
        i = start + 4
        while i < size and text[i].isspace():
            i += 1
        if i >= size:
            return found

        if text[i] in "'\"":
            quote = text[i]
            end = text.find(quote, i + 1)
            if end < 0:
                return found
            arg = text[i + 1:end]
            close = end + 1
            while close < size and text[close].isspace():
                close += 1
            if close >= size or text[close] != ")":
                pos = end + 1
                continue
        else:
            close = text.find(")", i)
            if close < 0:
                return found
            arg = text[i:close]

        arg = arg.strip()
        if arg:
            found.append(arg)
        pos = close + 1


def _resolve_style_urls(text: str, base: str) -> Iterator[str]:
    for raw in extract_style_urls(text):
        if raw.lower().startswith("data:"):
            continue
        try:
            yield normalize(raw, base)
        except NormalizationError as exc:
            logger.warning("Invalid URL %s in %s: %s", raw, base, exc.reason)


# --------------------------------------------------------------------------- #
# HTML                                                                        #
# --------------------------------------------------------------------------- #


def is_html_like(url: str, decoded_href: str, html_match: HtmlMatch = HtmlMatch.LOOSE) -> bool:
    """Decide whether an anchor target looks like an HTML page."""
    path = urlsplit(url).path.lower()
    if path.endswith(_HTML_SUFFIXES):
        return True
    if html_match is HtmlMatch.LOOSE:
        # ".htm" also covers ".html"
        return ".htm" in decoded_href.lower()
    return False


def _attr(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _resolve(raw: str, base: str) -> Optional[str]:
    try:
        return normalize(raw, base)
    except NormalizationError as exc:
        logger.warning("Skipping invalid URL %s on %s: %s", raw, base, exc.reason)
        return None


def _anchor(raw: str, source_url: str, scope: str, html_match: HtmlMatch) -> Optional[str]:
    if raw.startswith("#") or raw.lower().startswith(_IGNORED_SCHEMES):
        return None
    try:
        decoded = unquote(raw, errors="strict")
    except UnicodeDecodeError:
        logger.warning("Skipping invalid HTML URL: %s", raw)
        return None
    try:
        url = normalize(decoded, source_url)
    except NormalizationError as exc:
        logger.warning("Skipping invalid HTML URL %s: %s", decoded, exc.reason)
        return None

    if hostname(url) != scope:
        return None
    if not is_html_like(url, decoded, html_match):
        logger.debug("Skipping non-page link: %s", url)
        return None
    logger.debug("Adding HTML link: %s", url)
    return url


def _html_discoveries(
    soup: BeautifulSoup, source_url: str, scope: str, html_match: HtmlMatch
) -> Iterator[Discovery]:
    for tag in soup.find_all("script", src=True):
        src = _attr(tag, "src")
        url = _resolve(src, source_url) if src else None
        if url:
            yield Discovery(url, Label.JS)

    for tag in soup.find_all("link", href=True):
        rel = tag.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "stylesheet" not in (r.lower() for r in rel):
            continue
        href = _attr(tag, "href")
        url = _resolve(href, source_url) if href else None
        if url:
            yield Discovery(url, Label.CSS)

    for tag in soup.find_all("img", src=True):
        src = _attr(tag, "src")
        url = _resolve(src, source_url) if src else None
        if url:
            yield Discovery(url, Label.IMAGE)

    for tag in soup.find_all("style"):
        text = tag.string if tag.string is not None else tag.get_text()
        if text:
            for url in _resolve_style_urls(str(text), source_url):
                yield Discovery(url, Label.IMAGE)

    for tag in soup.find_all(style=True):
        style = _attr(tag, "style")
        if style:
            for url in _resolve_style_urls(style, source_url):
                yield Discovery(url, Label.IMAGE)

    for tag in soup.find_all("a", href=True):
        href = _attr(tag, "href")
        url = _anchor(href, source_url, scope, html_match) if href else None
        if url:
            yield Discovery(url, Label.HTML)


def _unique(discoveries: Iterator[Discovery]) -> List[Discovery]:
    return list(dict.fromkeys(discoveries))


def extract_html(
    body: Union[bytes, str],
    source_url: str,
    scope: str,
    html_match: HtmlMatch = HtmlMatch.LOOSE,
) -> List[Discovery]:
    """Discover resources and in-scope pages referenced by an HTML document."""
    soup = BeautifulSoup(body, "html.parser")
    return _unique(_html_discoveries(soup, source_url, scope, html_match))


def extract_css(body: Union[bytes, str], source_url: str) -> List[Discovery]:
    """Discover images referenced by ``url(...)`` in a stylesheet."""
    text = body.decode("utf-8", errors="replace") if isinstance(body, (bytes, bytearray)) else body
    return _unique(Discovery(url, Label.IMAGE) for url in _resolve_style_urls(text, source_url))


def extract(
    category: Category,
    body: Union[bytes, str],
    source_url: str,
    scope: str,
    html_match: HtmlMatch = HtmlMatch.LOOSE,
) -> List[Discovery]:
    """Return the new ``(url, label)`` references found in *body*, in document order."""
    if category is Category.HTML:
        return extract_html(body, source_url, scope, html_match)
    if category is Category.STYLESHEET:
        return extract_css(body, source_url)
    return []
