"""Centralized logging configuration.

Processes given a log_dir get their own log files:
- {log_dir}/{process}.log (+ .YYYY-MM-DD rotations)

Usage in each process entry point:
    from .logging_config import setup_process_logging
    setup_process_logging("cli", log_dir)

Then in any module:
    from .logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Hello")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def _formatter(process_name: str, datefmt: str) -> logging.Formatter:
    """[time] [process] [LEVEL] module: message"""
    return logging.Formatter(
        fmt=f"[%(asctime)s] [{process_name}] [%(levelname)s] %(name)s: %(message)s",
        datefmt=datefmt,
    )


def _attach(root: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def setup_process_logging(
    process_name: str,
    log_dir: Path | None = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """Route all catalog logging for this process.

    Only long-running processes (the ``watch`` command) pass a log_dir;
    one-shot CLI calls log to stderr only.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if console:
        # Clock time is enough on a terminal
        _attach(root, FlushingStreamHandler(sys.stderr), level, _formatter(process_name, "%H:%M:%S"))

    if log_dir is None:
        return root

    log_dir.mkdir(parents=True, exist_ok=True)
    file_fmt = _formatter(process_name, "%Y-%m-%d %H:%M:%S")

    daily = TimedRotatingFileHandler(
        log_dir / f"{process_name}.log", when="midnight", backupCount=14, encoding="utf-8"
    )
    daily.suffix = "%Y-%m-%d"
    _attach(root, daily, level, file_fmt)

    # Also capped at 1MB x 3 regardless of date
    _attach(
        root,
        RotatingFileHandler(log_dir / f"{process_name}-current.log", maxBytes=1024 * 1024, backupCount=3, encoding="utf-8"),
        level,
        file_fmt,
    )
    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger; call as ``logger = get_logger(__name__)``."""
    return logging.getLogger(name)
