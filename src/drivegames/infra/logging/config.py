from __future__ import annotations

"""
Logging Configuration Models.

Immutable settings consumed by `configure_logging`, plus the table that maps
level names from settings files and CLI flags onto logging constants.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Transport libraries whose per-request chatter drowns explorer diagnostics
DEFAULT_QUIET_LOGGERS: Tuple[str, ...] = ("urllib3", "requests")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging setup for one explorer process.

    Attributes:
        level: Minimum severity captured by our handlers.
        console: Write records to stderr.
        log_file: Optional rotating diagnostics file.
        max_bytes: Size at which the diagnostics file rotates.
        backup_count: Rotated files kept next to the active one.
        quiet_loggers: Third-party loggers held at WARNING regardless of `level`.
        console_fmt: Format for terminal output.
        file_fmt: Format for file entries.
        datefmt: Timestamp format.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024  # 1MB
    backup_count: int = 2
    quiet_loggers: Tuple[str, ...] = DEFAULT_QUIET_LOGGERS

    console_fmt: str = "%(levelname)s | %(name)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
