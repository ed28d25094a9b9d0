"""
Logging helpers for git-autofixup.

Diagnostics go through the standard logging module; the CLI maps the
repeatable -v flag onto a log level once per run.
"""

from __future__ import annotations

import logging

_PLAIN_FORMAT = "git-autofixup: %(levelname)s: %(message)s"
_DEBUG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def log_level(verbosity: int) -> int:
    """
    Map the -v count onto a log level.

    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO (hunks left without a fixup target)
    verbosity >= 2 -> DEBUG (git commands and per-hunk blame tables)
    """

    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def log_format(verbosity: int) -> str:
    # Logger names only help when reading debug traces.
    return _DEBUG_FORMAT if verbosity >= 2 else _PLAIN_FORMAT


def configure_logging(verbosity: int) -> None:
    """
    Configure the root logger based on a verbosity count.
    """

    logging.basicConfig(level=log_level(verbosity), format=log_format(verbosity))
