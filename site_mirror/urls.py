# File: site_mirror/urls.py
"""site_mirror.urls: resolving references, extracting hosts and naming artifacts."""

from __future__ import annotations

import hashlib
import posixpath
import re
from typing import Sequence
from urllib.parse import quote, unquote, urljoin, urlsplit, urlunsplit

from site_mirror.errors import NormalizationError, SeedInvalid

__all__: Sequence[str] = (
    "normalize",
    "hostname",
    "validate_seed",
    "derive_file_name",
)

_HTTP_SCHEMES = ("http", "https")
# sub-delims, ":" and "@" are legal in a path; "%" keeps existing escapes intact
_SAFE_PATH = "/%:@!$&'()*+,;=~"
_SAFE_QUERY = _SAFE_PATH + "?"
# tabs and newlines are dropped from URLs by browsers, other controls are fatal
_STRIPPED_RE = re.compile(r"[\t\r\n]")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_MAX_NAME = 200
_DEFAULT_PORTS = {"http": 80, "https": 443}
# trailing ":port" (possibly empty), never part of an IPv6 literal
_PORT_RE = re.compile(r":\d*$")


def _remove_dot_segments(path: str) -> str:
    out: list[str] = []
    segments = path.split("/")
    for seg in segments:
        if seg == "..":
            if len(out) > 1:
                out.pop()
        elif seg != ".":
            out.append(seg)
    if segments[-1] in (".", ".."):
        out.append("")
    return "/".join(out)


def normalize(reference: str, base: str = "") -> str:
    """Resolve *reference* against *base* and return a canonical absolute URL.

    Scheme and host are lower-cased, an empty path becomes ``/``, the
    fragment is dropped and characters that are illegal in a path or query
    are percent-encoded. Raises :class:`NormalizationError` when the result
    is not an absolute ``http(s)`` URL.
    """
    ref = _STRIPPED_RE.sub("", reference or "").strip()
    if not ref:
        raise NormalizationError(reference, base, "empty reference")
    if _CONTROL_RE.search(ref):
        raise NormalizationError(reference, base, "control characters")

    try:
        parts = urlsplit(urljoin(base, ref) if base else ref)
        host = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError as exc:
        raise NormalizationError(reference, base, str(exc)) from exc

    scheme = parts.scheme.lower()
    if scheme not in _HTTP_SCHEMES:
        raise NormalizationError(
            reference, base, f"unsupported scheme {scheme!r}" if scheme else "no scheme"
        )
    if not host:
        raise NormalizationError(reference, base, "missing host")

    userinfo, at, hostport = parts.netloc.rpartition("@")
    hostport = hostport.lower()
    if parts.port is None or parts.port == _DEFAULT_PORTS[scheme]:
        hostport = _PORT_RE.sub("", hostport)
    netloc = userinfo + at + hostport
    path = quote(_remove_dot_segments(parts.path or "/"), safe=_SAFE_PATH)
    query = quote(parts.query, safe=_SAFE_QUERY)
    return urlunsplit((scheme, netloc, path, query, ""))


def hostname(url: str) -> str:
    """Return the lower-case host of *url* (``""`` if it has none)."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def validate_seed(url: str) -> str:
    """Return the normalized seed URL or raise :class:`SeedInvalid`."""
    try:
        return normalize(url)
    except NormalizationError as exc:
        raise SeedInvalid(url, exc.reason) from exc


def derive_file_name(url: str, default_suffix: str = "") -> str:
    """Derive an artifact name from the last segment of the decoded URL path.

    When that segment is empty, a dot segment, or the path is not valid
    percent-encoded UTF-8, the name is ``file-<token><default_suffix>``
    where the token is taken from the SHA-1 of *url*, so the same URL
    always maps to the same name.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url.split("?", 1)[0]

    try:
        decoded = unquote(path, errors="strict")
    except UnicodeDecodeError:
        decoded = ""

    name = posixpath.basename(decoded).replace("\\", "_").replace("\x00", "")
    if name in ("", ".", ".."):
        token = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
        return f"file-{token}{default_suffix}"

    if len(name) > _MAX_NAME:
        stem, ext = posixpath.splitext(name)
        name = stem[: _MAX_NAME - len(ext)] + ext
    return name
