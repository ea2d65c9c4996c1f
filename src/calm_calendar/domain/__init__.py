"""Domain models for the calendar engine."""

from __future__ import annotations

from .enums import (
    AttendeeStatus,
    ChangeAction,
    ExternalSource,
    NavigationDirection,
    RecurrenceFrequency,
    ViewMode,
    WorkspaceRole,
)
from .inputs import AttendeeInput, CreateEventInput, EventPatch
from .models import (
    CalendarEvent,
    EventAttendee,
    FilterCriteria,
    PermissionSet,
    RecurrencePattern,
    TimeRange,
    WorkspaceMember,
)

__all__ = [
    "AttendeeInput",
    "AttendeeStatus",
    "CalendarEvent",
    "ChangeAction",
    "CreateEventInput",
    "EventAttendee",
    "EventPatch",
    "ExternalSource",
    "FilterCriteria",
    "NavigationDirection",
    "PermissionSet",
    "RecurrenceFrequency",
    "RecurrencePattern",
    "TimeRange",
    "ViewMode",
    "WorkspaceMember",
    "WorkspaceRole",
]
