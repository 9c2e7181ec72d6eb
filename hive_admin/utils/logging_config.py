"""Logging configuration for the Hive admin client."""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

# Bearer credentials and token/secret fields that may end up in messages
_SECRET_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(
        r"((?:access_token|refresh_token|client_secret|password)['\"]?\s*[:=]\s*['\"]?)[^'\"&\s,}]+",
        re.IGNORECASE,
    ),
]


class SecretRedactingFilter(logging.Filter):
    """Masks bearer tokens and credential fields in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def redact(text: str) -> str:
    """Replace credential values in text with a placeholder."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(r"\1***", text)
    return text


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    name: str = "hive_admin",
) -> logging.Logger:
    """
    Configure logging for the admin client.

    Console output goes to stderr so command output on stdout stays
    machine-readable.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers.clear()
    redactor = SecretRedactingFilter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S")
    )
    console_handler.addFilter(redactor)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)-8s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        file_handler.addFilter(redactor)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "hive_admin") -> logging.Logger:
    """Get an existing logger by name."""
    return logging.getLogger(name)
