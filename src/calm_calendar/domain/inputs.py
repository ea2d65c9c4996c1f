from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ExternalSource
from .models import CalendarEvent, EventAttendee, RecurrencePattern


class AttendeeInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    name: str = Field(default="")
    is_organizer: bool = Field(default=False)

    @classmethod
    def from_attendee(cls, attendee: EventAttendee) -> "AttendeeInput":
        return cls(email=attendee.email, name=attendee.name, is_organizer=attendee.is_organizer)


class CreateEventInput(BaseModel):
    """Caller-supplied fields for a new event.

    Identity, ownership and attendee RSVP state are assigned by the state
    machine, so they have no place here.
    """

    model_config = ConfigDict(extra="forbid")

    title: str
    start_time: datetime
    end_time: datetime
    type: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)
    all_day: bool = Field(default=False)
    attendees: List[AttendeeInput] = Field(default_factory=list)
    color: Optional[str] = Field(default=None)
    is_recurring: bool = Field(default=False)
    recurrence_pattern: Optional[RecurrencePattern] = Field(default=None)
    external_id: Optional[str] = Field(default=None)
    external_source: Optional[ExternalSource] = Field(default=None)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_resizable: bool = Field(default=True)


_REQUIRED_FIELDS = ("title", "type", "start_time", "end_time", "all_day", "attendees", "is_recurring", "is_resizable")


class EventPatch(BaseModel):
    """Partial update for an existing event.

    Only fields the caller actually passed are applied; ``None`` clears an
    optional field but is rejected for fields every event must carry.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    all_day: Optional[bool] = None
    attendees: Optional[List[EventAttendee]] = None
    color: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    external_id: Optional[str] = None
    external_source: Optional[ExternalSource] = None
    metadata: Optional[Dict[str, Any]] = None
    is_resizable: Optional[bool] = None

    @model_validator(mode="after")
    def _reject_cleared_required(self) -> "EventPatch":
        for name in _REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set

    @classmethod
    def from_event(cls, event: CalendarEvent) -> "EventPatch":
        """Patch carrying every mutable field of ``event``."""

        return cls(**{name: getattr(event, name) for name in cls.model_fields})
