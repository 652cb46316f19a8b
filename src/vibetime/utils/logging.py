"""
Logging setup for the VibeTime daemon.

Daemon events and the pulse stream written by the log output backend share
the root handlers by default. The pulse stream lives on the
``vibetime.output`` logger, so it can be quieted with its own level or
routed to a file of its own without touching daemon logs.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

OUTPUT_LOGGER = "vibetime.output"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: '{name}'")
    return level


def _rotating_handler(path: str, formatter: logging.Formatter) -> RotatingFileHandler:
    log_path = Path(path).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    output_level: Optional[str] = None,
    output_file: Optional[str] = None,
) -> None:
    """
    Configure daemon logging and the pulse stream.

    Safe to call more than once: previously installed handlers are replaced.

    Args:
        log_level: Root level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Daemon log file, rotated at 10MB with 5 backups (optional)
        console: Whether to log to stderr (stdout belongs to the console backend)
        output_level: Level for the pulse stream (default: inherit log_level).
                      WARNING silences per-pulse lines.
        output_file: Send the pulse stream to this rotating file instead of
                     the daemon handlers (optional)

    Raises:
        ValueError: If a level name is not recognized

    Example:
        >>> setup_logging(
        ...     log_file="~/.vibetime/logs/daemon.log",
        ...     output_file="~/.vibetime/logs/pulses.log",
        ... )
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(_parse_level(log_level))
    root_logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        root_logger.addHandler(_rotating_handler(log_file, formatter))

    output_logger = logging.getLogger(OUTPUT_LOGGER)
    output_logger.handlers.clear()
    output_logger.setLevel(_parse_level(output_level) if output_level else logging.NOTSET)
    output_logger.propagate = not output_file

    if output_file:
        output_logger.addHandler(_rotating_handler(output_file, formatter))

    logging.getLogger("vibetime.logging").debug(
        f"Logging configured: level={log_level}, file={log_file}, "
        f"output_level={output_level or 'inherit'}, output_file={output_file}"
    )
