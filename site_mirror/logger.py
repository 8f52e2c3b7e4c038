# === FILE: site_mirror/logger.py ===
"""Logging setup for **SiteMirror**.

Every module logs through the one importable instance::

    from site_mirror.logger import logger
    logger.info("Saved %s: %s", "image", path)

Records go to stdout and, optionally, to a rotating log file. Since a
crawl interleaves the output of several workers, each record is stamped
with the name of the asyncio task that emitted it (``worker-3``, or ``-``
outside the event loop); the ``worker`` preset prints it.
"""
from __future__ import annotations

import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Mapping, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

LOGGER_NAME: Final[str] = "SiteMirror"

LOG_FORMATS: Final[Mapping[str, str]] = {
    "default": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    "worker": "%(asctime)s | %(levelname)-8s | %(task)-9s | %(message)s",
    "short": "%(levelname)s: %(message)s",
}
DEFAULT_FORMAT: Final[str] = LOG_FORMATS["default"]

_MAX_BYTES = 5 * 1024 * 1024
_BACKUPS = 3

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


class TaskNameFilter(logging.Filter):
    """Set ``record.task`` to the name of the current asyncio task."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            task = asyncio.current_task()
        except RuntimeError:
            task = None
        record.task = task.get_name() if task is not None else "-"
        return True


def resolve_format(log_format: str) -> logging.Formatter:
    """Build a formatter from a preset name or a ``%``-style format string.

    Raises ``ValueError`` when *log_format* is neither.
    """
    fmt = LOG_FORMATS.get(log_format, log_format)
    try:
        return logging.Formatter(fmt, validate=True)
    except ValueError as exc:
        raise ValueError(
            f"invalid log format {log_format!r}; use one of {', '.join(LOG_FORMATS)} "
            f"or a %-style format string"
        ) from exc


def _handlers(log_file: str | Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=_MAX_BYTES,
                backupCount=_BACKUPS,
                encoding="utf-8",
            )
        )
    return handlers


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = "default",
) -> logging.Logger:
    """(Re)configure the project logger, replacing any previous handlers.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a logfile, rotated at 5 MiB. *None* → console-only output.
    log_format
        A key of :data:`LOG_FORMATS` or a format string; ``%(task)s`` is
        available in either.
    """
    formatter = resolve_format(log_format)

    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    for handler in _handlers(log_file):
        handler.setFormatter(formatter)
        handler.addFilter(TaskNameFilter())
        lg.addHandler(handler)

    lg.propagate = False
    return lg


# --------------------------------------------------------------------------- #
# Ready-to-use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = configure()

__all__ = ["logger", "configure", "resolve_format", "TaskNameFilter", "LOG_FORMATS", "DEFAULT_FORMAT", "LOGGER_NAME"]
