"""Logging for CourseHub.

Every component logs under the ``coursehub`` logger; ``setup_logging`` gives
that logger a rotating file (and optionally stderr). Directory and level come
from ``Settings``, so COURSEHUB_LOG_DIR and COURSEHUB_LOG_LEVEL are applied by
``load_settings`` rather than here.
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "coursehub"
LOG_FILE = "coursehub.log"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_REDACTIONS = [
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[a-zA-Z0-9._-]+"), "token=[REDACTED]"),
    (
        re.compile(r'"(password|current_password|new_password)"\s*:\s*"[^"]*"'),
        r'"\1": "[REDACTED]"',
    ),
    (re.compile(r"(password|current_password|new_password)=[^&\s]+"), r"\1=[REDACTED]"),
]


def _file_handler(log_dir: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_dir / LOG_FILE,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    log_dir: str | Path = "logs",
    level: str = "INFO",
    *,
    console: bool = True,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """Route the coursehub logger to ``<log_dir>/coursehub.log``.

    Handlers from an earlier call are closed first, so the CLI and tests can
    call this repeatedly.

    Args:
        log_dir: Directory for the log file; created if missing.
        level: Level name. Unknown names fall back to INFO.
        console: Also write to stderr.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.

    Returns:
        The ``coursehub`` logger.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    _close_handlers(logger)

    handlers = [_file_handler(Path(log_dir), max_bytes, backup_count)]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(
        "Logging to %s at %s", Path(log_dir) / LOG_FILE, logging.getLevelName(log_level)
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Component logger under ``coursehub`` (e.g. 'store' -> 'coursehub.store')."""
    if not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def sanitize_for_log(text: str) -> str:
    """Redact bearer tokens, token parameters and password fields."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text
