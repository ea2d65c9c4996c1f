"""Tests for the JSON event journal."""

from datetime import datetime, timedelta, timezone

import orjson
import pytest

from calm_calendar.data import EventJournal
from calm_calendar.domain import ChangeAction, EventPatch
from calm_calendar.services import CalendarStateMachine

UTC = timezone.utc


@pytest.fixture(name="journal")
def journal_fixture(tmp_path) -> EventJournal:
    return EventJournal(tmp_path / "journal" / "events.jsonl")


class TestEventJournal:
    """Tests for EventJournal."""

    def test_record_writes_file(self, journal: EventJournal, make_event):
        """Recording appends one JSON line with a sequential token."""
        start = datetime(2025, 8, 6, 10, tzinfo=UTC)

        entry = journal.record(make_event("evt_1", start, start + timedelta(hours=1)), ChangeAction.CREATED)
        journal.record(make_event("evt_2", start, start), ChangeAction.CREATED)

        assert entry["token"] == "tok_000001"
        assert entry["action"] == "created"
        lines = journal.path.read_bytes().splitlines()
        assert [orjson.loads(line)["event"]["id"] for line in lines] == ["evt_1", "evt_2"]
        assert orjson.loads(lines[1])["token"] == "tok_000002"

    def test_record_only_appends(self, journal: EventJournal, make_event):
        """Earlier lines are left untouched by later writes."""
        start = datetime(2025, 8, 6, 10, tzinfo=UTC)
        journal.record(make_event("evt_1", start, start), ChangeAction.CREATED)
        first_write = journal.path.read_bytes()

        journal.record(make_event("evt_1", start, start), ChangeAction.DELETED)

        assert journal.path.read_bytes().startswith(first_write)

    def test_reload_from_disk(self, journal: EventJournal, make_event):
        """A fresh journal on the same path sees earlier entries."""
        start = datetime(2025, 8, 6, 10, tzinfo=UTC)
        journal.record(make_event("evt_1", start, start), ChangeAction.CREATED)

        reopened = EventJournal(journal.path)

        assert [entry["event"]["id"] for entry in reopened.entries()] == ["evt_1"]

    def test_as_mutation_hook(self, journal: EventJournal, machine: CalendarStateMachine, context, make_input):
        """Registered as a hook, the journal captures every mutation."""
        context.add_hook(journal)

        created = machine.create_event(make_input())
        machine.update_event(created.id, EventPatch(title="Retro"))
        second = machine.create_event(make_input(title="Lunch"))
        machine.delete_event(created.id)

        assert [entry["action"] for entry in journal.entries()] == ["created", "updated", "created", "deleted"]
        replayed = journal.replay()
        assert [event.id for event in replayed] == [second.id]
        assert replayed[0].title == "Lunch"
        assert replayed[0].start_time == second.start_time

    def test_replay_after_clear(self, journal: EventJournal, machine: CalendarStateMachine, context, make_input):
        """Cleared events do not come back on replay."""
        context.add_hook(journal)
        machine.create_event(make_input())
        machine.create_event(make_input(title="Lunch"))

        machine.clear_events()

        assert journal.replay() == []
