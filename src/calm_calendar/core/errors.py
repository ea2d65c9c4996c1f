from __future__ import annotations


class CalendarError(Exception):
    """Base class for errors raised by the calendar engine."""


class ValidationError(CalendarError, ValueError):
    """Raised when an operation receives malformed input."""


class NotFoundError(CalendarError, LookupError):
    """Raised when an operation references an event or member that does not exist."""
