"""Application constants and the error taxonomy."""

from .config import APP_NAME, DATA_DIR, JOURNAL_FILE, LOG_FILE
from .errors import CalendarError, NotFoundError, ValidationError

__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "JOURNAL_FILE",
    "LOG_FILE",
    "CalendarError",
    "NotFoundError",
    "ValidationError",
]
