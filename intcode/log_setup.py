"""
Logging setup for the Intcode tools.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the CLI (or a test harness).

Console: rich ``RichHandler`` on stderr, WARNING+ by default.
File:    optional, captures everything at DEBUG with function/line info.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .config import (
    CONSOLE_DATE_FORMAT, CONSOLE_LOG_FORMAT, DEFAULT_CONSOLE_LEVEL,
    DEFAULT_LEVEL, FILE_DATE_FORMAT, FILE_LOG_FORMAT, LOGGER_NAME,
)


def setup_logging(
    name: str = LOGGER_NAME,
    level: int = DEFAULT_LEVEL,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return a logger.

    Calling it again for the same name returns the configured logger
    unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(level)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(fh)

    # ── Console handler: only important stuff (WARNING+ default) ──
    if rich_console:
        ch = RichHandler(
            console=Console(stderr=True),
            level=console_level,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT, datefmt=CONSOLE_DATE_FORMAT))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s (console level %s)",
                 name, logging.getLevelName(console_level))
    if log_file is not None:
        logger.debug("Log file: %s", log_file)

    return logger


def verbosity_to_level(verbose: int, quiet: bool = False) -> int:
    """Map -v counts to a console level (0 → WARNING, 1 → INFO, 2+ → DEBUG)."""
    if quiet:
        return logging.ERROR
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG
