"""Logging setup shared by the entrypoint and the operator CLI."""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from volume_seeder.constants import DEFAULT_LOG_FORMAT, ENV_MODE, PRODUCTION_LOG_DIR


def is_production() -> bool:
    """Production when running inside a container, or explicitly told so."""
    return (
        os.environ.get(ENV_MODE) == "production" or
        Path("/.dockerenv").exists()
    )


def get_log_directory() -> Path:
    """
    Determine the appropriate log directory based on environment.

    Returns:
        Path to log directory - uses /var/log/volume-seeder/ in production,
        logs/ directory in development
    """
    log_dir = PRODUCTION_LOG_DIR if is_production() else Path.cwd() / "logs"

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Read-only image layers or unprivileged users: fall back to local logs
        log_dir = Path.cwd() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_log_file_path(log_filename: str = "seeder.log") -> str:
    """
    Determine the appropriate log file path based on environment.

    Absolute filenames are used as given.
    """
    if os.path.isabs(log_filename):
        Path(log_filename).parent.mkdir(parents=True, exist_ok=True)
        return log_filename
    return str(get_log_directory() / log_filename)


def setup_logging(
    name: str = "",
    level: int|str = logging.INFO,
    log_filename: Optional[str] = None,
    include_console: bool = True,
) -> logging.Logger:
    """
    Setup logging with an optional log file.

    Console output goes to stderr so it doesn't mix with the downstream
    service's stdout after handoff.

    Args:
        name: Logger name; empty configures the root logger
        level: Logging level
        log_filename: Log file name or absolute path (no file logging if None)
        include_console: Whether to include console output

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level_name = level.upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f'Invalid log level: {level_name}')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    handlers: list = []

    if log_filename is not None:
        file_handler = logging.FileHandler(get_log_file_path(log_filename))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    if include_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        handlers.append(console_handler)

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    if not name or name == "root":
        root_logger.handlers.clear()
        for handler in handlers:
            root_logger.addHandler(handler)
        return root_logger

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Root already configured, rely on propagation
    if root_logger.hasHandlers():
        return logger

    for handler in handlers:
        logger.addHandler(handler)

    return logger
