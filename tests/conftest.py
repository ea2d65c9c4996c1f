"""Shared test fixtures."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from calm_calendar.config import AppSettings, CalendarSettings
from calm_calendar.domain import AttendeeStatus, CalendarEvent, CreateEventInput, EventAttendee
from calm_calendar.services import CalendarStateMachine, ServiceContext

UTC = timezone.utc
NOW = datetime(2025, 8, 6, 9, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture(name="id_factory")
def id_factory_fixture():
    """Sequential identifiers shared across prefixes."""
    counter = itertools.count(1)

    def _next(prefix: str) -> str:
        return f"{prefix}_{next(counter):04d}"

    return _next


@pytest.fixture(name="settings")
def settings_fixture() -> AppSettings:
    return AppSettings(calendar=CalendarSettings(timezone="UTC"))


@pytest.fixture(name="context")
def context_fixture(settings, clock, id_factory) -> ServiceContext:
    return ServiceContext(
        settings=settings,
        clock=clock,
        id_factory=id_factory,
        current_user_id="user_1",
        workspace_id="ws_1",
    )


@pytest.fixture(name="machine")
def machine_fixture(context) -> CalendarStateMachine:
    return CalendarStateMachine(context=context)


@pytest.fixture(name="make_input")
def make_input_fixture():
    """Build a valid CreateEventInput, overriding any field."""

    def _make(**overrides) -> CreateEventInput:
        payload = {
            "title": "Standup",
            "type": "meeting",
            "start_time": datetime(2025, 8, 6, 10, 0, tzinfo=UTC),
            "end_time": datetime(2025, 8, 6, 10, 30, tzinfo=UTC),
            "attendees": [
                {"email": "ada@example.com", "name": "Ada", "is_organizer": True},
                {"email": "bob@example.com", "name": "Bob"},
            ],
        }
        payload.update(overrides)
        return CreateEventInput(**payload)

    return _make


@pytest.fixture(name="make_event")
def make_event_fixture():
    """Build a CalendarEvent directly, bypassing the state machine."""

    def _make(event_id: str, start: datetime, end: datetime, **overrides) -> CalendarEvent:
        attendees = overrides.pop("attendees", None)
        if attendees is None:
            attendees = [EventAttendee(id="att_a", email="ada@example.com", name="Ada", status=AttendeeStatus.ACCEPTED)]
        fields = {
            "id": event_id,
            "title": f"Event {event_id}",
            "type": "meeting",
            "start_time": start,
            "end_time": end,
            "workspace_id": "ws_1",
            "created_by": "user_1",
            "attendees": attendees,
        }
        fields.update(overrides)
        return CalendarEvent(**fields)

    return _make
