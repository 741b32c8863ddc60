"""Logging configuration for the stream monitor.

This module provides logging configuration and setup functions to ensure
consistent logging across the application.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from stream_monitor.core.config import get_settings

# Define logging categories for different parts of the application
LOG_CATEGORIES = {
    "STREAM": "Stream",
    "PROBE": "Probe",
    "DELIVERY": "Delivery",
    "ROUND": "Round",
    "SCHEDULER": "Scheduler",
    "DATABASE": "Database",
    "QUEUE": "Queue",
    "API": "API",
    "SYSTEM": "System",
}


def setup_logging(
    name: str, log_level: Optional[str] = None, log_file: Optional[str] = None
) -> logging.Logger:
    """Set up a logger with the specified configuration.

    Handlers are attached once per logger name, so calling this from several
    modules that share a name does not duplicate output.

    Args:
        name: Name of the logger
        log_level: Optional logging level (defaults to settings)
        log_file: Optional log file path (defaults to settings)

    Returns:
        logging.Logger: Configured logger instance
    """
    settings = get_settings()
    logger = logging.getLogger(name)

    level = (log_level or settings.LOG_LEVEL).upper()
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(settings.LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_name = log_file or settings.LOG_FILE
    if file_name:
        file_path = Path(file_name)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_with_category(
    logger: logging.Logger, category: str, level: str, message: str, exc_info: Optional[bool] = None
) -> None:
    """Log a message prefixed with a category tag.

    Args:
        logger: Logger to use
        category: Category of the message (e.g. 'STREAM', 'PROBE')
        level: Level name ('debug', 'info', 'warning', 'error', 'critical')
        message: Message to log
        exc_info: If True, include exception information
    """
    level = level.lower()
    if level not in ("debug", "info", "warning", "error", "critical"):
        # Default to info
        level = "info"
    log_method = getattr(logger, level)
    log_method(f"[{category}] {message}", exc_info=exc_info)
