"""Log setup for the vpm command line."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "vpm"

CONSOLE_FORMAT = "[vpm] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``vpm.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route vpm records to stderr and optionally to ``log_file``.

    The console shows INFO and above, or DEBUG with ``verbose``. A log file
    always records DEBUG, so the per-unit reference counts and synthesized
    target names of a batch can be inspected after a quiet run. The file is
    appended to and its parent directory is created when missing; an
    unwritable location raises ``OSError``.
    """
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        logger.addHandler(_file_handler(Path(log_file)))
    return logger


def _file_handler(path: Path) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


__all__ = ["configure_logging", "get_logger"]
