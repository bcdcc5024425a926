"""Logger hierarchy for stackscan.

Every module logs through ``get_logger("<area>")``, which yields a child of
the ``stackscan`` logger. Nothing is emitted until ``configure_logging`` is
called by the CLI or the service; library callers keep control of their
own handlers.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

ROOT_LOGGER = "stackscan"
CONSOLE_FORMAT = "[stackscan] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``stackscan.<name>``, or the root stackscan logger when no name is given."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach stderr (and optionally file) handlers to the stackscan logger.

    Console output goes to stderr so ``--json`` output on stdout stays
    machine-readable. Calling this again replaces the previous handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(sink)

    return logger


def progress_logger(logger: logging.Logger, prefix: str = "") -> Callable[[str, float], None]:
    """Return a progress callback that records each phase report at DEBUG level."""

    def _report(label: str, percent: float) -> None:
        logger.debug("%s%s (%.0f%%)", prefix, label, percent)

    return _report


__all__ = ["configure_logging", "get_logger", "progress_logger"]
