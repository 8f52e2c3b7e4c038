# File: site_mirror/errors.py
"""site_mirror.errors: exceptions raised while mirroring a site.

Only :class:`SeedInvalid` is fatal. Every other error is scoped to a single
request, reference or artifact and is logged by the caller.
"""
from __future__ import annotations

__all__ = [
    "MirrorError",
    "SeedInvalid",
    "TransportFailure",
    "NormalizationError",
    "WriteError",
    "NonBinaryImagePayload",
]


class MirrorError(Exception):
    """Base class for all SiteMirror errors."""


class SeedInvalid(MirrorError, ValueError):
    """The seed URL cannot be parsed, so no domain scope can be established."""

    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        self.reason = reason
        msg = f'Invalid URL "{url}"'
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class TransportFailure(MirrorError):
    """A fetch failed (network error, timeout, error status)."""

    def __init__(self, url: str, message: str, status: int | None = None) -> None:
        self.url = url
        self.message = message
        self.status = status
        super().__init__(f"{url}: {message}")


class NormalizationError(MirrorError):
    """A reference cannot be turned into an absolute http(s) URL."""

    def __init__(self, reference: str, base: str = "", reason: str = "") -> None:
        self.reference = reference
        self.base = base
        self.reason = reason
        msg = f"cannot resolve {reference!r}"
        if base:
            msg += f" against {base}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class WriteError(MirrorError):
    """An artifact could not be written to disk."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class NonBinaryImagePayload(MirrorError):
    """An image body arrived as decoded text instead of raw bytes."""

    def __init__(self, url: str, payload_type: str) -> None:
        self.url = url
        self.payload_type = payload_type
        super().__init__(f"{url}: expected bytes, got {payload_type}")
