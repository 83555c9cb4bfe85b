"""History log shared by the relay server and its CLI.

Every record goes to one named logger with a rotating file handler (and,
unless disabled, stderr). Records carry a short ``tag`` naming the part of the
relay that wrote them, e.g. ``[AUTH]`` or ``[UPLD]``.
"""

from __future__ import annotations

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from drive_relay.config import settings

LOGGER_NAME = "drive_relay.history"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 7
DEFAULT_TAG = "GEN"

# Checked in order against the last component of the module name.
MODULE_TAGS = (
    ("oauth", "AUTH"),
    ("auth_flow", "AUTH"),
    ("token", "AUTH"),
    ("credential", "AUTH"),
    ("upload", "UPLD"),
    ("drive", "DRIVE"),
    ("people", "PEOPLE"),
    ("api", "HTTP"),
    ("relay", "CLI"),
    ("status", "CLI"),
)


class _DefaultTag(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tag"):
            record.tag = DEFAULT_TAG
        return True


def level_from_name(name: Optional[str]) -> int:
    level = logging.getLevelName(str(name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def tag_for(module_name: str) -> str:
    leaf = module_name.lower().rsplit(".", 1)[-1]
    for key, tag in MODULE_TAGS:
        if key in leaf:
            return tag
    return DEFAULT_TAG


def configure_logging(
    *,
    log_path: Optional[Path] = None,
    level: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    console: Optional[bool] = None,
) -> logging.Logger:
    """Install the history handlers, replacing whatever the logger had before.

    ``log_path``, ``level`` and ``console`` default to the ``settings`` values.
    An unusable log file is reported on stderr and the relay keeps running.
    """
    reset_logging()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_from_name(level or settings.RELAY_LOG_LEVEL))
    logger.propagate = False

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(tag)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    formatter.converter = time.gmtime

    handlers: list[logging.Handler] = []
    path = Path(log_path) if log_path is not None else settings.log_path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )
    except OSError as exc:
        print(f"drive-relay: cannot open log file {path}: {exc}", file=sys.stderr)

    if settings.RELAY_LOG_TO_CONSOLE if console is None else console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_DefaultTag())
        logger.addHandler(handler)
    return logger


def relay_logger() -> logging.Logger:
    """The history logger, configured from ``settings`` on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging()
    return logger


def reset_logging() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
