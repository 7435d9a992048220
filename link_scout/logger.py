# === FILE: link_scout/logger.py ===
"""Logging setup for **LinkScout**.

Highlights
----------
* Everything logs through the ``LinkScout`` logger or one of its children
  (``LinkScout.crawler``, ``LinkScout.robots``, ...), see :func:`get_logger`.
* Log lines go to stderr, so the reports printed on stdout stay clean;
  an optional rotating log file can be added.
* The CLI calls :func:`configure` once per invocation from ``--log-level``
  and ``--log-file``; library users may call it themselves or leave the
  quiet ``WARNING`` default in place::

      from link_scout.logger import configure
      configure(level="DEBUG")   # per-URL crawl progress
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "LinkScout"
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        # swapped-in streams (click's CliRunner, pytest capture) are followed lazily
        pass


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "WARNING",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set level and handlers of the ``LinkScout`` logger and return it.

    Parameters
    ----------
    level
        ``"DEBUG"`` shows every fetched URL with its status and depth,
        ``"INFO"`` crawl start/finish and robots.txt loading, ``"WARNING"``
        only problems (safety cap reached, unparseable pages).
    log_file
        Also append to this file, rotated at 5 MiB with three backups.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop previously installed handlers first.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    console = _StderrHandler()
    console.setFormatter(logging.Formatter(log_format))
    lg.addHandler(console)

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the project logger or its child ``LinkScout.<name>``."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


# --------------------------------------------------------------------------- #
# Ready-to-use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = configure()

__all__ = ["logger", "configure", "get_logger"]
