"""Logging bootstrap for hosts embedding the calendar engine.

Library modules only call ``logging.getLogger(__name__)``; nothing is
configured until the host calls :func:`configure_logging`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import get_settings


_INITIALIZED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(name: str) -> Optional[int]:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def configure_logging(level: Optional[str] = None, *, log_path: Optional[Path] = None) -> None:
    """Send calendar logs to a rotating file under the data directory and to stderr.

    ``level`` and ``log_path`` default to ``CALM_LOG_LEVEL`` and
    ``CALM_LOG_FILE``. Unknown level names fall back to INFO with a
    warning. Repeated calls are no-ops.
    """

    global _INITIALIZED
    if _INITIALIZED:
        return

    settings = get_settings().logging
    requested = level or settings.level
    log_file = log_path or settings.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(str(log_file), maxBytes=1_000_000, backupCount=5)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    resolved = _resolve_level(requested)
    root = logging.getLogger()
    root.setLevel(resolved if resolved is not None else logging.INFO)
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    _INITIALIZED = True
    logger = logging.getLogger(__name__)
    if resolved is None:
        logger.warning("Unknown log level %r, using INFO", requested)
    logger.debug(
        "Calendar logging ready (level=%s, file=%s, timezone=%s)",
        logging.getLevelName(root.level),
        log_file,
        get_settings().calendar.timezone,
    )


__all__ = ["configure_logging"]
