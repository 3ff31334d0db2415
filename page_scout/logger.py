# === FILE: page_scout/logger.py ===
"""Logging for **PageScout**.

All modules log through the ``PageScout`` logger or its children
(``PageScout.crawler``, ``PageScout.sitemap``, ...)::

    from page_scout.logger import get_logger
    log = get_logger("crawler")
    log.warning("Failed to crawl %s: %s", url, exc)

Console output goes to stderr, since the CLI prints JSON results to stdout.
The initial level comes from ``PAGE_SCOUT_LOG_LEVEL`` (default ``INFO``);
the CLI calls :func:`init_logging` with its own options.
"""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

# --------------------------------------------------------------------------- #
# Constants                                                                   #
# --------------------------------------------------------------------------- #

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "PageScout"
LEVEL_ENV: Final[str] = "PAGE_SCOUT_LOG_LEVEL"

# aiohttp client/server loggers are chatty at INFO (access log of test servers)
THIRD_PARTY_LOGGERS: Final[tuple[str, ...]] = ("aiohttp.access", "aiohttp.client", "aiohttp.server")

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


def _console_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _rotating_handler(file: Path | str, fmt: str) -> logging.Handler:
    path = Path(file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _resolve_level(level: _LevelT | None) -> int:
    if level is None:
        level = os.environ.get(LEVEL_ENV, "INFO")
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown log level: {level!r}")
        return value
    return level


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT | None = None,
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the ``PageScout`` logger.

    Parameters
    ----------
    level
        Numeric or textual level; ``None`` reads ``PAGE_SCOUT_LOG_LEVEL``.
    log_file
        Optional logfile (rotated at 2 MB, 3 backups) next to the console output.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop and close handlers from a previous call first.
    """
    numeric = _resolve_level(level)
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(numeric)

    if replace_handlers:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    root.addHandler(_console_handler(log_format))
    if log_file is not None:
        root.addHandler(_rotating_handler(log_file, log_format))
    root.propagate = False

    noisy = logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(noisy)
    return root


def init_logging(
    level: _LevelT | None = None,
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry: replace handlers and apply the command-line options."""
    return configure(level=level, log_file=log_file, log_format=log_format)


def get_logger(name: str | None = None) -> logging.Logger:
    """``PageScout`` logger, or its child ``PageScout.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "DEFAULT_FORMAT", "LOGGER_NAME"]
