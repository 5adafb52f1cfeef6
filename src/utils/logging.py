"""Logging setup for the FTP session client.

Every module logs under the ``ftp_session`` logger tree. Messages go
through PIIRedactingFormatter so that login secrets and host addresses
never reach the console or the log file in clear text.
"""

import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Pattern, Tuple


LOGGER_NAME = "ftp_session"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PII_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r'(passw(?:or)?d["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    # PASS command echoed from the control connection
    (re.compile(r'(PASS\s+)\S+'), r'\1[REDACTED]'),
    (re.compile(r'ftp://[^:/\s]+:[^@\s]+@'), 'ftp://[REDACTED]@'),
    # keep the network part of IPv4 addresses only
    (re.compile(r'(\d+\.\d+\.)\d+\.\d+'), r'\1*.*'),
]


def redact(message: str) -> str:
    """Apply every PII pattern to ``message``."""
    for pattern, replacement in PII_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class PIIRedactingFormatter(logging.Formatter):
    """Formatter whose output has passed through redact()."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the ``ftp_session`` logger.

    Handlers from an earlier call are removed first, so calling this
    again reconfigures rather than duplicates output.

    Args:
        level: Threshold for the logger and its handlers
        log_file: Also append to this file, creating its directory
        console: Write to stderr, keeping stdout free for command output

    Returns:
        The ``ftp_session`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = PIIRedactingFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Logger for ``ftp_session.<component>``, or the package logger."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}" if component else LOGGER_NAME)
