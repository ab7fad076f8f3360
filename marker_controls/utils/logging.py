"""
Dual-sink logging for the marker controls server.

Logs to both stdout AND a log file.
"""

import sys
import logging
from pathlib import Path
from typing import Optional


# Log file paths (in order of preference)
LOG_FILE_PATHS = [
    "/var/log/marker_controls.log",
    "/tmp/marker_controls.log",
]

BROADCASTER_LOGGER = "marker_controls.broadcaster"


def _first_writable_path() -> Optional[str]:
    """Return the first default log path that can be opened for append."""
    for path in LOG_FILE_PATHS:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a'):
                pass
            return path
        except (PermissionError, OSError):
            continue
    return None


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: str = None,
                  log_ticks: bool = False) -> logging.Logger:
    """
    Setup dual-sink logging.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Override log file path. If None, uses default paths.
        log_format: Override log format string.
        log_ticks: Keep per-tick broadcaster DEBUG lines when verbose.

    Returns:
        The marker_controls package logger
    """
    level = logging.DEBUG if verbose else logging.INFO

    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    file_path = log_file if log_file is not None else _first_writable_path()
    if file_path:
        try:
            file_handler = logging.FileHandler(file_path, mode='a')
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(log_format))
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging at {file_path}: {e}",
                  file=sys.stderr)

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=handlers
    )

    logger = logging.getLogger("marker_controls")
    logger.setLevel(level)

    # The broadcaster ticks every 10 ms
    tick_level = logging.DEBUG if (verbose and log_ticks) else logging.INFO
    logging.getLogger(BROADCASTER_LOGGER).setLevel(tick_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)
