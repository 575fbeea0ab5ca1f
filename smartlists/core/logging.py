"""Centralized logging configuration for SmartLists.

All modules log through children of the ``smartlists`` logger
(``smartlists.smart_lists.compiler`` and so on). The host application calls
``setup_logging`` once; without it the library stays silent.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

__all__ = ["logger", "parse_level", "setup_logging"]

logger = logging.getLogger("smartlists")


def parse_level(level: int | str) -> int:
    """Converts a level name such as ``"debug"`` to its numeric value.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
) -> None:
    """Configure the SmartLists logger.

    Args:
        level: The logging level or its name (default: INFO).
        log_file: Optional path to a log file. If provided, logs will
            also be written to this file.
    """
    level = parse_level(level)
    logger.setLevel(level)

    if logger.handlers:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
