# === FILE: deal_scout/logger.py ===
"""Logger ``DealScout``: stderr output plus an optional rotating log file.

Modules log through the shared instance::

    from deal_scout.logger import logger

The CLI calls :func:`init_logging` once its options are parsed.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "DealScout"

_LevelT = Union[int, str]


def _stderr_handler(fmt: str) -> logging.StreamHandler:
    # stdout carries the JSON report
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set the level and handlers of the ``DealScout`` logger.

    With *replace_handlers* the old handlers are closed and removed first.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            handler.close()
        lg.handlers.clear()

    lg.addHandler(_stderr_handler(log_format))
    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


# quiet until the CLI applies --log-level
logger: logging.Logger = init_logging(level="WARNING")

__all__ = ["logger", "configure", "init_logging"]
