"""
Arithmetic Machine — Logging Setup

Console logs go through rich's RichHandler; an optional file handler
captures everything at DEBUG. The library itself only creates module
loggers, the CLI is what calls setup_logging().
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "arithvm"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Args:
        level: Console level (WARNING by default, DEBUG with --verbose)
        log_file: Optional path; gets DEBUG+ with the long format

    Calling it again replaces the handlers from the previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # ── Console handler (stderr, so PRINT output on stdout stays clean) ──
    ch = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    # ── File handler: captures everything ──
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)
        logger.debug("Log file: %s", log_path)

    return logger
