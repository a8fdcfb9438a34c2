"""
Logging configuration for the sqlite-spike harness.

Module loggers print ``[LEVEL] message`` to stdout. The harness re-applies the
configured level, and an optional log file with timestamps, once the YAML
configuration has been read.
"""
import logging
import os
import sys
import warnings
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "sqlite_spike"
LEVEL_ENV_VAR = "SQLITE_SPIKE_LOG_LEVEL"

CONSOLE_FORMAT = '[%(levelname)s] %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    parsed = logging.getLevelName(level.upper())
    if not isinstance(parsed, int):
        raise ValueError(f"Unknown log level: {level}")
    return parsed


def _default_level() -> int:
    value = os.environ.get(LEVEL_ENV_VAR, "INFO")
    try:
        return _parse_level(value)
    except ValueError:
        # Loggers are built at import time, so a bad value must not abort the import
        warnings.warn(f"Unknown {LEVEL_ENV_VAR}={value!r}, using INFO", RuntimeWarning, stacklevel=2)
        return logging.INFO


def setup_logger(
    name: str,
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level; defaults to $SQLITE_SPIKE_LOG_LEVEL or INFO
        log_file: Optional file path for log output (always at DEBUG)

    Returns:
        Configured logger instance
    """
    level = _default_level() if level is None else _parse_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)
    # Re-running setup must not stack handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def configure_package_logging(level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None) -> None:
    """Re-apply level and file output to every logger already created under the package."""
    level = _parse_level(level)
    names = [n for n in logging.root.manager.loggerDict if n.startswith(PACKAGE_LOGGER)]
    for name in names:
        setup_logger(name, level=level, log_file=log_file)
