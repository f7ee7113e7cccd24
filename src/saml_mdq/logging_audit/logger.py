"""Logging configuration and logger factory for the SAML MDQ client.

This module provides centralized logging configuration with support for:
- Console handler at a configurable level
- Optional rotating file handler at DEBUG level
- Environment variable configuration of the log file
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5
LOG_FILE_ENV_VAR = "SAML_MDQ_LOG_FILE"

# Handlers installed by configure_logging, removed on reconfiguration
_installed_handlers: list[logging.Handler] = []

logger = logging.getLogger(__name__)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
) -> None:
    """Configure logging for the SAML MDQ client.

    Idempotent: calling it again replaces the handlers installed by the
    previous call.

    Args:
        level: Log level for console output (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               File handler always uses DEBUG level.
        log_file: Path to log file. If None, SAML_MDQ_LOG_FILE is used when set;
                 otherwise only console logging is configured.

    Raises:
        ValueError: If invalid log level is provided
        RuntimeError: If log directory cannot be created

    Example:
        >>> configure_logging(level="DEBUG")
        >>> configure_logging(level="INFO", log_file=Path("logs/mdq.log"))
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )

    if log_file is None and (env_log_file := os.environ.get(LOG_FILE_ENV_VAR)):
        log_file = Path(env_log_file)

    root_logger = logging.getLogger()
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    root_logger.setLevel(logging.DEBUG if log_file else numeric_level)
    formatter = logging.Formatter(fmt=DEFAULT_LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if log_file is None:
        return

    log_dir = Path(log_file).parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(
            f"Failed to create log directory: {log_dir}. "
            f"Ensure write permissions are available. Error: {e}"
        ) from e

    try:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        # Keep console logging rather than failing the caller
        logger.warning(
            f"Failed to create file handler for {log_file}: {e}. "
            f"Logging to console only."
        )
        return

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    _installed_handlers.append(file_handler)
