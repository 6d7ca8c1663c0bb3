"""Logging setup shared by the library modules and the ``polydoc`` command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_ROOT_LOGGER = "polydoc"
_CONSOLE_FORMAT = "[%(name)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``polydoc.<name>``, or the package logger itself."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}" if name else _ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route polydoc records to stderr and, optionally, to ``log_file``.

    ``verbose`` adds the per-file debug records. ``quiet`` hides the per-file
    diagnostics, which are logged at WARNING, and keeps errors only. The file
    sink records everything regardless of the console level.
    """
    if verbose and quiet:
        raise ValueError("verbose and quiet cannot be combined")
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.ERROR
    else:
        console_level = logging.INFO

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    logger.propagate = False

    # A second CLI invocation in the same process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
