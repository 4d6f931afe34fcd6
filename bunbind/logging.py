"""Logging setup shared by the bunbind CLI and library entry points."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Diagnostic

_ROOT = "bunbind"
_CONSOLE_FORMAT = "[bunbind] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_SEVERITY_LEVELS = {
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``bunbind`` or a child logger such as ``bunbind.emitter``."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the bunbind logger.

    Calling this again replaces the previous handlers, so repeated CLI
    invocations inside one process never print a message twice.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
        )
    return logger


def log_diagnostic(logger: logging.Logger, diagnostic: "Diagnostic") -> None:
    """Emit a generation diagnostic at the level matching its severity."""
    level = _SEVERITY_LEVELS.get(diagnostic.severity, logging.INFO)
    logger.log(level, "%s: %s", diagnostic.path, diagnostic.message)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["configure_logging", "get_logger", "log_diagnostic"]
