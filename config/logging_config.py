"""
Centralized logging configuration.
Entry points (API app, CLI) call setup_logger; engine modules only use
logging.getLogger(__name__) and inherit the handlers configured here.
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from .constants import (
    LOG_LEVEL, LOG_FORMAT, LOG_FILE,
    LOG_MAX_SIZE_MB, LOG_BACKUP_COUNT
)


def setup_logger(
    name: str = None,
    log_file: Optional[str] = LOG_FILE,
    level: Optional[str] = None,
) -> logging.Logger:
    """
    Get or create a configured logger.

    Usage:
        from config.logging_config import setup_logger
        logger = setup_logger("core")
        logger.info("Message here")

    Args:
        name: Logger name. If None, uses 'notelayout'.
        log_file: Rotating log file path, or None/"" for console only.
        level: Logger level name; defaults to LOG_LEVEL.

    Returns:
        Configured logging.Logger instance.
    """
    logger = logging.getLogger(name or 'notelayout')

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    # Console handler - INFO level
    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console)

    if log_file:
        # File handler with rotation - DEBUG level
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
            backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger

