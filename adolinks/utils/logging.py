"""Logging configuration for adolinks.

Library modules log through ``logging.getLogger(__name__)`` so a hosting
process can route the records wherever it likes. When adolinks runs on its
own (the CLI), ``setup_logging`` attaches a file handler controlled by
environment variables.

Environment Variables:
    ADOLINKS_LOG: Set to "true" to enable logging (default: "false")
    ADOLINKS_LOG_FILE: Path to log file (default: ~/.adolinks.log)
"""

import logging
import os
from pathlib import Path

# Environment variable configuration
LOG_ENABLED = os.environ.get("ADOLINKS_LOG", "false").lower() == "true"
LOG_FILE = Path(os.environ.get("ADOLINKS_LOG_FILE", str(Path.home() / ".adolinks.log")))

# Module-level logger instance
_logger: logging.Logger | None = None


def setup_logging(enabled: bool | None = None, log_file: Path | None = None) -> logging.Logger:
    """Configure the ``adolinks`` package logger.

    Creates a logger that writes to the configured log file when logging
    is enabled. Otherwise, uses a NullHandler so records only reach
    handlers installed by the host (or the root logger).

    Args:
        enabled: Override for ADOLINKS_LOG
        log_file: Override for ADOLINKS_LOG_FILE

    Returns:
        Configured logger instance
    """
    global _logger

    if _logger is not None:
        return _logger

    enabled = LOG_ENABLED if enabled is None else enabled
    log_file = log_file or LOG_FILE

    logger = logging.getLogger("adolinks")

    # Clear any existing handlers
    logger.handlers.clear()

    if enabled:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(log_file)
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    else:
        logger.addHandler(logging.NullHandler())

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the configured package logger, creating it if necessary."""
    global _logger
    if _logger is None:
        return setup_logging()
    return _logger


def reset_logging() -> None:
    """Forget the configured logger so the next call reconfigures it."""
    global _logger
    if _logger is not None:
        _logger.handlers.clear()
    _logger = None


def log_message(message: str) -> None:
    """Log an informational message on the package logger.

    Args:
        message: Message to log
    """
    get_logger().info(message)


__all__ = [
    "LOG_ENABLED",
    "LOG_FILE",
    "setup_logging",
    "get_logger",
    "reset_logging",
    "log_message",
]
