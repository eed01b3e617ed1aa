"""Centralized logging configuration for the DDL export tool.

Two loggers matter to the application: the ``ddl_export_tool`` tree used by
every module, and its ``echo`` child that receives the rendered DDL line by
line when echoing is switched on.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

APP_LOGGER_NAME = "ddl_export_tool"
ECHO_SUFFIX = "echo"


def setup_logger(
    name: str = APP_LOGGER_NAME,
    log_dir: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    echo_to_console: bool = False,
) -> logging.Logger:
    """Configure and return the application logger.

    Module loggers (``get_logger(__name__)``) are children of this logger and
    share its handlers.

    Args:
        name: Root logger name for the application
        log_dir: Directory for the dated log file. If None, nothing is
            written to disk.
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        echo_to_console: Also print echoed DDL lines, bare, on stderr

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if echo_to_console:
        _setup_echo(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_file = log_path / f"ddl_export_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    # Console only shows warnings and errors so DDL on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    return logger


def _setup_echo(name: str) -> None:
    echo = get_echo_logger(name)
    echo.setLevel(logging.INFO)
    if any(getattr(h, "ddl_echo", False) for h in echo.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.INFO)
    # Echoed lines are DDL, print them without any prefix
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler.ddl_echo = True
    echo.addHandler(handler)


def get_echo_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Logger that receives echoed DDL lines."""
    return logging.getLogger(f"{name}.{ECHO_SUFFIX}")


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger instance.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
