"""Logging setup for command-line runs."""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: int | str = logging.INFO,
    filename: str | Path | None = None,
    stdout: bool = True,
) -> logging.Logger:
    """Attach stream and/or file handlers to the package logger.

    Existing handlers installed by a previous call are replaced, so calling
    this twice does not duplicate output.
    """

    log = logging.getLogger("feedforward")
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
    log.setLevel(level)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    if filename is not None:
        fhandler = logging.FileHandler(filename, mode="w")
        fhandler.setFormatter(formatter)
        log.addHandler(fhandler)
    if stdout:
        shandler = logging.StreamHandler()
        shandler.setFormatter(formatter)
        log.addHandler(shandler)
    return log


__all__ = ["DATE_FORMAT", "LOG_FORMAT", "configure_logging"]
