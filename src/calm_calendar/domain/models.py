from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from .enums import AttendeeStatus, ExternalSource, RecurrenceFrequency, WorkspaceRole


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError(f"Unsupported datetime value: {value!r}")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(slots=True)
class EventAttendee:
    id: str
    email: str
    name: str
    status: AttendeeStatus = AttendeeStatus.PENDING
    is_organizer: bool = False

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "EventAttendee":
        return cls(
            id=str(record["id"]),
            email=str(record["email"]),
            name=str(record.get("name") or ""),
            status=AttendeeStatus(record.get("status") or AttendeeStatus.PENDING),
            is_organizer=bool(record.get("is_organizer", False)),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "status": self.status.value,
            "is_organizer": self.is_organizer,
        }


@dataclass(slots=True)
class RecurrencePattern:
    """Stored recurrence rule. The engine keeps it verbatim and never expands it."""

    frequency: RecurrenceFrequency
    interval: int = 1
    days_of_week: List[int] = field(default_factory=list)
    day_of_month: Optional[int] = None
    end_date: Optional[datetime] = None
    count: Optional[int] = None

    def __post_init__(self) -> None:
        if self.interval < 1:
            raise ValueError("interval must be at least 1")
        if any(day < 0 or day > 6 for day in self.days_of_week):
            raise ValueError("days_of_week entries must be between 0 (Sunday) and 6")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "RecurrencePattern":
        return cls(
            frequency=RecurrenceFrequency(record["frequency"]),
            interval=int(record.get("interval") or 1),
            days_of_week=[int(day) for day in record.get("days_of_week") or []],
            day_of_month=record.get("day_of_month"),
            end_date=_parse_datetime(record["end_date"]) if record.get("end_date") else None,
            count=record.get("count"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "frequency": self.frequency.value,
            "interval": self.interval,
            "days_of_week": list(self.days_of_week),
            "day_of_month": self.day_of_month,
            "end_date": _iso(self.end_date),
            "count": self.count,
        }


@dataclass(slots=True)
class CalendarEvent:
    id: str
    title: str
    type: str
    start_time: datetime
    end_time: datetime
    workspace_id: str
    created_by: str
    description: Optional[str] = None
    location: Optional[str] = None
    all_day: bool = False
    attendees: List[EventAttendee] = field(default_factory=list)
    color: Optional[str] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    last_modified: int = 0
    last_modified_by: str = ""
    external_id: Optional[str] = None
    external_source: Optional[ExternalSource] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    is_resizable: bool = True

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def attendee_ids(self) -> List[str]:
        return [attendee.id for attendee in self.attendees]

    def has_declined_attendee(self) -> bool:
        return any(attendee.status is AttendeeStatus.DECLINED for attendee in self.attendees)

    def snapshot(self) -> "CalendarEvent":
        return deepcopy(self)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        pattern = record.get("recurrence_pattern")
        source = record.get("external_source")
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            type=str(record.get("type") or "default"),
            start_time=_parse_datetime(record["start_time"]),
            end_time=_parse_datetime(record["end_time"]),
            workspace_id=str(record.get("workspace_id") or ""),
            created_by=str(record.get("created_by") or ""),
            description=record.get("description"),
            location=record.get("location"),
            all_day=bool(record.get("all_day", False)),
            attendees=[EventAttendee.from_record(item) for item in record.get("attendees") or []],
            color=record.get("color"),
            is_recurring=bool(record.get("is_recurring", False)),
            recurrence_pattern=RecurrencePattern.from_record(pattern) if pattern else None,
            last_modified=int(record.get("last_modified") or 0),
            last_modified_by=str(record.get("last_modified_by") or ""),
            external_id=record.get("external_id"),
            external_source=ExternalSource(source) if source else None,
            metadata=dict(record.get("metadata") or {}),
            is_resizable=bool(record.get("is_resizable", True)),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "description": self.description,
            "location": self.location,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "all_day": self.all_day,
            "attendees": [attendee.to_record() for attendee in self.attendees],
            "workspace_id": self.workspace_id,
            "created_by": self.created_by,
            "color": self.color,
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern.to_record() if self.recurrence_pattern else None,
            "last_modified": self.last_modified,
            "last_modified_by": self.last_modified_by,
            "external_id": self.external_id,
            "external_source": self.external_source.value if self.external_source else None,
            "metadata": self.metadata,
            "is_resizable": self.is_resizable,
        }


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("time range start must not be after its end")

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """True unless ``[start, end]`` lies entirely before or after the range."""

        return not (end < self.start or start > self.end)


@dataclass(frozen=True)
class FilterCriteria:
    attendee_ids: FrozenSet[str] = frozenset()
    event_types: FrozenSet[str] = frozenset()
    hide_declined: bool = False

    def __post_init__(self) -> None:
        # Accept any iterable from callers but store immutable sets.
        object.__setattr__(self, "attendee_ids", frozenset(self.attendee_ids))
        object.__setattr__(self, "event_types", frozenset(self.event_types))

    @property
    def is_unconstrained(self) -> bool:
        return not (self.attendee_ids or self.event_types or self.hide_declined)


@dataclass(frozen=True)
class PermissionSet:
    can_create_events: bool = False
    can_edit_events: bool = False
    can_delete_events: bool = False
    can_manage_members: bool = False
    can_manage_integrations: bool = False
    can_manage_settings: bool = False
    can_view_all_events: bool = False
    can_export_calendar: bool = False

    @classmethod
    def capabilities(cls) -> List[str]:
        return [item.name for item in fields(cls)]

    def allows(self, capability: str) -> bool:
        if capability not in self.capabilities():
            return False
        return bool(getattr(self, capability))

    def granted(self) -> List[str]:
        return [name for name in self.capabilities() if getattr(self, name)]

    def to_record(self) -> Dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in self.capabilities()}


@dataclass(slots=True)
class WorkspaceMember:
    id: str
    workspace_id: str
    user_id: str
    email: str
    name: str
    role: WorkspaceRole = WorkspaceRole.VIEWER
    is_active: bool = True
    joined_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "WorkspaceMember":
        return cls(
            id=str(record["id"]),
            workspace_id=str(record["workspace_id"]),
            user_id=str(record["user_id"]),
            email=str(record["email"]),
            name=str(record.get("name") or ""),
            role=WorkspaceRole(record.get("role") or WorkspaceRole.VIEWER),
            is_active=bool(record.get("is_active", True)),
            joined_at=_parse_datetime(record["joined_at"]) if record.get("joined_at") else None,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "is_active": self.is_active,
            "joined_at": _iso(self.joined_at),
        }


def unique_attendee_ids(attendees: Iterable[EventAttendee]) -> bool:
    identifiers = [attendee.id for attendee in attendees]
    return len(identifiers) == len(set(identifiers))
