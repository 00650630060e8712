# Copyright (C) 2024 Collimator, Inc.
# SPDX-License-Identifier: AGPL-3.0-only
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU Affero General Public License as published by the Free
# Software Foundation, version 3. This program is distributed in the hope that it
# will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU Affero General
# Public License for more details.  You should have received a copy of the GNU
# Affero General Public License along with this program. If not, see
# <https://www.gnu.org/licenses/>.

"""Logging of the state selection.

All messages go to the `stateselection` logger. By default it has no handler,
so messages propagate to the root logger; `set_stream_handler` and
`set_file_handler` attach handlers to the package logger only.
"""

import functools
import logging
import time
from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING

__all__ = [
    "logger",
    "logdata",
    "scope_logging",
    "set_log_level",
    "set_file_handler",
    "set_stream_handler",
    "unset_stream_handler",
    "ColorFormatter",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

logger = logging.getLogger(__package__)

_BOLD = "\033[1m"
_LIGHTGREY = "\033[37m"
_RESET = "\033[0m"
_LEVEL_COLORS = (
    (ERROR, "\033[31m"),
    (WARNING, "\033[33m"),
    (INFO, "\033[32m"),
    (DEBUG, "\033[34m"),
)


class ColorFormatter(logging.Formatter):
    """Colored terminal output. Key/value pairs attached with `logdata` are
    appended to the message."""

    def format(self, record):
        color = next(
            (c for level, c in _LEVEL_COLORS if record.levelno >= level), "\033[36m"
        )
        ftime = time.strftime("%H:%M:%S", time.localtime(record.created))
        s = (
            f"{ftime} {_BOLD}[{record.name}][{color}{record.levelname}{_RESET}"
            f"{_BOLD}]{_RESET} {record.getMessage()}"
        )

        extras = getattr(record, "extras", None)
        if extras:
            s += " " + " ".join(f"{_LIGHTGREY}{k}{_RESET}={v}" for k, v in extras.items())
        return s


_formatter = logging.Formatter(fmt="%(name)s:%(levelname)s %(message)s")
_stream_handler = logging.StreamHandler()
_stream_handler.setFormatter(_formatter)


def set_file_handler(file, formatter=None):
    """Write the state selection log to `file` (overwritten)."""
    fh = logging.FileHandler(file, mode="w")
    fh.setFormatter(formatter or _formatter)
    logger.addHandler(fh)
    return fh


def set_stream_handler(handler=None):
    """Print the state selection log to stderr, or to a custom handler."""
    logger.addHandler(handler or _stream_handler)


def unset_stream_handler():
    logger.removeHandler(_stream_handler)


def set_log_level(level):
    """Set the level of the package logger.

    Args:
        level: An int such as `logging.DEBUG` or a level name such as "debug".
    """
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)


def scope_logging(func):
    """Decorator to log entry and exit (with the elapsed time) of a stage of
    the state selection."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug("*** Entering %s ***", func.__qualname__)
        start = time.perf_counter()
        result = func(*args, **kwargs)
        logger.debug(
            "*** Exiting %s *** (%.3f ms)",
            func.__qualname__,
            1000 * (time.perf_counter() - start),
        )
        return result

    return wrapper


def logdata(*, equations=None, **kwargs):
    """Attach key/value pairs to a log record, rendered by `ColorFormatter`:

    logger.debug("torn level", **logdata(block=3, level=1, equations=[4, 5]))

    Equation indices are rendered as `eq.k`.
    """
    extras = dict(kwargs)
    if equations is not None:
        extras["equations"] = ", ".join(f"eq.{eq}" for eq in equations)

    if len(extras) == 0:
        return {}

    return {"extra": {"extras": extras}}
