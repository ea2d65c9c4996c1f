from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PayloadError

from ..core.errors import NotFoundError, ValidationError
from ..domain import (
    AttendeeInput,
    AttendeeStatus,
    CalendarEvent,
    ChangeAction,
    CreateEventInput,
    EventAttendee,
    EventPatch,
    FilterCriteria,
    NavigationDirection,
    TimeRange,
    ViewMode,
)
from ..domain.models import unique_attendee_ids
from ..scheduling import apply_filters, compute_range, index_by_day, shift_anchor
from ..scheduling.time_range import localize, parse_view
from .context import ServiceContext

logger = logging.getLogger(__name__)

EventUpdate = Union[EventPatch, Mapping[str, Any]]


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


@dataclass(slots=True)
class CalendarStateMachine:
    """Single owner of the calendar's view state and event set.

    Every command runs to completion synchronously. Events handed out, or
    passed to mutation hooks, are snapshots; the owned list is never shared.
    """

    context: ServiceContext = field(default_factory=ServiceContext)
    _view_mode: ViewMode = field(init=False)
    _anchor_date: datetime = field(init=False)
    _selected_date: datetime = field(init=False)
    _time_range: TimeRange = field(init=False)
    _events: List[CalendarEvent] = field(init=False, default_factory=list)
    _filters: FilterCriteria = field(init=False, default_factory=FilterCriteria)
    _selected_event_id: Optional[str] = field(init=False, default=None)
    _last_stamp: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        today = self.context.now()
        self._view_mode = self.context.settings.calendar.default_view
        self._anchor_date = today
        self._selected_date = today
        self._time_range = self._compute(today, self._view_mode)

    # Read-only state ------------------------------------------------------
    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    @property
    def anchor_date(self) -> datetime:
        return self._anchor_date

    @property
    def selected_date(self) -> datetime:
        return self._selected_date

    @property
    def time_range(self) -> TimeRange:
        return self._time_range

    @property
    def filters(self) -> FilterCriteria:
        return self._filters

    @property
    def selected_event_id(self) -> Optional[str]:
        return self._selected_event_id

    @property
    def workspace_id(self) -> str:
        return self.context.workspace_id

    @property
    def events(self) -> List[CalendarEvent]:
        return [event.snapshot() for event in self._events]

    def get_event(self, event_id: str) -> CalendarEvent:
        return self._require(event_id).snapshot()

    # View and navigation --------------------------------------------------
    def _compute(self, anchor: datetime, view: ViewMode) -> TimeRange:
        return compute_range(
            anchor,
            view,
            tz=self.context.tz,
            agenda_days=self.context.settings.calendar.agenda_days,
        )

    def set_view(self, view: Union[ViewMode, str]) -> TimeRange:
        self._view_mode = parse_view(view)
        self._time_range = self._compute(self._anchor_date, self._view_mode)
        logger.debug("View set to %s: %s -> %s", self._view_mode.value, self._time_range.start, self._time_range.end)
        return self._time_range

    def navigate_to_date(self, value: Union[date, datetime]) -> TimeRange:
        anchor = localize(_as_datetime(value), self.context.tz)
        self._anchor_date = anchor
        self._time_range = self._compute(anchor, self._view_mode)
        logger.debug("Anchor moved to %s (%s view)", anchor.isoformat(), self._view_mode.value)
        return self._time_range

    def navigate(self, direction: Union[NavigationDirection, str]) -> TimeRange:
        anchor = shift_anchor(
            self._anchor_date,
            self._view_mode,
            direction,
            tz=self.context.tz,
            agenda_days=self.context.settings.calendar.agenda_days,
        )
        return self.navigate_to_date(anchor)

    def go_to_today(self) -> TimeRange:
        return self.navigate_to_date(self.context.now())

    def set_selected_date(self, value: Union[date, datetime]) -> None:
        self._selected_date = localize(_as_datetime(value), self.context.tz)

    def set_selected_event(self, event_id: Optional[str]) -> None:
        if event_id is not None:
            self._require(event_id)
        self._selected_event_id = event_id

    def set_workspace(self, workspace_id: str) -> None:
        """Applies to events created from now on; existing events keep their workspace."""

        self.context.workspace_id = workspace_id
        logger.info("Workspace switched to %s", workspace_id)

    # Filtering ------------------------------------------------------------
    def set_filters(self, criteria: FilterCriteria) -> FilterCriteria:
        self._filters = criteria
        return self._filters

    def update_filters(
        self,
        *,
        attendee_ids: Optional[Iterable[str]] = None,
        event_types: Optional[Iterable[str]] = None,
        hide_declined: Optional[bool] = None,
    ) -> FilterCriteria:
        overrides: Dict[str, Any] = {}
        if attendee_ids is not None:
            overrides["attendee_ids"] = frozenset(attendee_ids)
        if event_types is not None:
            overrides["event_types"] = frozenset(event_types)
        if hide_declined is not None:
            overrides["hide_declined"] = hide_declined
        return self.set_filters(replace(self._filters, **overrides))

    def get_filtered_events(self) -> List[CalendarEvent]:
        return [event.snapshot() for event in apply_filters(self._events, self._filters)]

    def get_visible_events(self) -> Dict[str, List[CalendarEvent]]:
        """Day-keyed events inside the current window, after filtering.

        Day keys a spanning event reaches outside the window are dropped.
        """

        window = self._time_range
        in_window = [event for event in self._events if window.overlaps(event.start_time, event.end_time)]
        filtered = [event.snapshot() for event in apply_filters(in_window, self._filters)]
        first_key = window.start.date().isoformat()
        last_key = window.end.date().isoformat()
        return {
            key: bucket
            for key, bucket in index_by_day(filtered, tz=self.context.tz).items()
            if first_key <= key <= last_key
        }

    # Event commands -------------------------------------------------------
    def create_event(self, payload: Union[CreateEventInput, Mapping[str, Any]]) -> CalendarEvent:
        data = self._coerce_input(payload)
        tz = self.context.tz
        start, end = localize(data.start_time, tz), localize(data.end_time, tz)
        self._validate_title(data.title)
        self._validate_times(start, end, data.all_day)

        defaults = self.context.settings.calendar
        user_id = self.context.current_user_id
        event = CalendarEvent(
            id=self.context.id_factory("evt"),
            title=data.title,
            type=data.type or defaults.default_event_type,
            start_time=start,
            end_time=end,
            workspace_id=self.context.workspace_id,
            created_by=user_id,
            description=data.description,
            location=data.location,
            all_day=data.all_day,
            attendees=[self._new_attendee(item) for item in data.attendees],
            color=data.color or defaults.default_event_color,
            is_recurring=data.is_recurring,
            recurrence_pattern=deepcopy(data.recurrence_pattern),
            last_modified=self._stamp(),
            last_modified_by=user_id,
            external_id=data.external_id,
            external_source=data.external_source,
            metadata=deepcopy(data.metadata),
            is_resizable=data.is_resizable,
        )
        self._events.append(event)
        logger.info("Created event %s %r in workspace %s", event.id, event.title, event.workspace_id)
        self.context.notify(event, ChangeAction.CREATED)
        return event.snapshot()

    def update_event(self, event_id: str, patch: EventUpdate) -> CalendarEvent:
        event = self._require(event_id)
        changes = self._prepare_update(event, self._coerce_patch(patch).changes())
        self._commit_update(event, changes, self.context.current_user_id)
        return event.snapshot()

    def move_event(self, event_id: str, new_start: datetime, new_end: datetime) -> CalendarEvent:
        return self.update_event(event_id, EventPatch(start_time=new_start, end_time=new_end))

    def delete_event(self, event_id: str) -> CalendarEvent:
        removed = self._events.pop(self._index_of(event_id))
        if self._selected_event_id == event_id:
            self._selected_event_id = None
        logger.info("Deleted event %s", event_id)
        self.context.notify(removed, ChangeAction.DELETED)
        return removed.snapshot()

    def duplicate_event(self, event_id: str, new_anchor: Optional[datetime] = None) -> CalendarEvent:
        original = self._require(event_id)
        duration = original.duration
        start = localize(new_anchor, self.context.tz) if new_anchor is not None else original.start_time
        copy_input = CreateEventInput(
            title=f"{original.title} (Copy)",
            type=original.type,
            description=original.description,
            location=original.location,
            start_time=start,
            end_time=start + duration,
            all_day=original.all_day,
            attendees=[AttendeeInput.from_attendee(attendee) for attendee in original.attendees],
            color=original.color,
            is_recurring=original.is_recurring,
            recurrence_pattern=deepcopy(original.recurrence_pattern),
            metadata=deepcopy(original.metadata),
            is_resizable=original.is_resizable,
        )
        return self.create_event(copy_input)

    # Bulk operations ------------------------------------------------------
    def set_events(self, events: Iterable[CalendarEvent]) -> None:
        """Replace the event set wholesale, e.g. when loading from storage.

        Loading is not a mutation and does not notify hooks.
        """

        tz = self.context.tz
        loaded: List[CalendarEvent] = []
        seen: set[str] = set()
        for item in events:
            event = item.snapshot()
            event.start_time = localize(event.start_time, tz)
            event.end_time = localize(event.end_time, tz)
            self._validate_event(event)
            if event.id in seen:
                raise ValidationError(f"Duplicate event id {event.id}")
            seen.add(event.id)
            loaded.append(event)
        self._events = loaded
        if self._selected_event_id not in seen:
            self._selected_event_id = None
        logger.info("Loaded %d events", len(loaded))

    def clear_events(self) -> List[CalendarEvent]:
        removed, self._events = self._events, []
        self._selected_event_id = None
        logger.info("Cleared %d events", len(removed))
        for event in removed:
            self.context.notify(event, ChangeAction.DELETED)
        return [event.snapshot() for event in removed]

    def bulk_update_events(self, updates: Sequence[Tuple[str, EventUpdate]]) -> List[CalendarEvent]:
        """Apply several patches; nothing changes unless every one of them is valid.

        Patches for the same id are merged in order and validated as one
        update, so the result holds one snapshot per distinct id.
        """

        merged: Dict[str, Dict[str, Any]] = {}
        for event_id, patch in updates:
            self._require(event_id)
            merged.setdefault(event_id, {}).update(self._coerce_patch(patch).changes())
        prepared = []
        for event_id, changes in merged.items():
            event = self._require(event_id)
            prepared.append((event, self._prepare_update(event, changes)))
        for event, changes in prepared:
            self._commit_update(event, changes, self.context.current_user_id)
        return [event.snapshot() for event, _ in prepared]

    # External reconciliation ----------------------------------------------
    def handle_external_update(self, event: CalendarEvent, action: Union[ChangeAction, str]) -> CalendarEvent:
        """Apply a change pushed by a sync collaborator. Last writer wins."""

        try:
            action = ChangeAction(action)
        except ValueError as exc:
            raise ValidationError(f"Unknown change action: {action!r}") from exc

        if action is ChangeAction.DELETED:
            return self.delete_event(event.id)

        if action is ChangeAction.UPDATED:
            existing = self._require(event.id)
            changes = self._prepare_update(existing, EventPatch.from_event(event).changes())
            self._commit_update(existing, changes, event.last_modified_by or self.context.current_user_id)
            logger.info("Applied external update to %s", event.id)
            return existing.snapshot()

        incoming = event.snapshot()
        incoming.start_time = localize(incoming.start_time, self.context.tz)
        incoming.end_time = localize(incoming.end_time, self.context.tz)
        self._validate_event(incoming)
        incoming.workspace_id = incoming.workspace_id or self.context.workspace_id
        incoming.created_by = incoming.created_by or self.context.current_user_id
        incoming.last_modified_by = incoming.last_modified_by or incoming.created_by
        incoming.last_modified = self._stamp()
        try:
            self._events[self._index_of(incoming.id)] = incoming
            logger.info("External create replaced existing event %s", incoming.id)
        except NotFoundError:
            self._events.append(incoming)
            logger.info("External create added event %s", incoming.id)
        self.context.notify(incoming, ChangeAction.CREATED)
        return incoming.snapshot()

    # Internals ------------------------------------------------------------
    def _index_of(self, event_id: str) -> int:
        for index, event in enumerate(self._events):
            if event.id == event_id:
                return index
        raise NotFoundError(f"Event {event_id} not found")

    def _require(self, event_id: str) -> CalendarEvent:
        return self._events[self._index_of(event_id)]

    def _stamp(self) -> int:
        now_ms = int(self.context.clock().timestamp() * 1000)
        self._last_stamp = max(now_ms, self._last_stamp + 1)
        return self._last_stamp

    def _new_attendee(self, attendee: AttendeeInput) -> EventAttendee:
        return EventAttendee(
            id=self.context.id_factory("att"),
            email=attendee.email,
            name=attendee.name,
            status=AttendeeStatus.PENDING,
            is_organizer=attendee.is_organizer,
        )

    @staticmethod
    def _coerce_input(payload: Union[CreateEventInput, Mapping[str, Any]]) -> CreateEventInput:
        if isinstance(payload, CreateEventInput):
            return payload
        try:
            return CreateEventInput.model_validate(dict(payload))
        except PayloadError as exc:
            logger.warning("Rejected event payload: %s", exc)
            raise ValidationError(str(exc)) from exc

    @staticmethod
    def _coerce_patch(patch: EventUpdate) -> EventPatch:
        if isinstance(patch, EventPatch):
            return patch
        try:
            return EventPatch.model_validate(dict(patch))
        except PayloadError as exc:
            logger.warning("Rejected event patch: %s", exc)
            raise ValidationError(str(exc)) from exc

    @staticmethod
    def _validate_title(title: Optional[str]) -> None:
        if not title or not title.strip():
            logger.warning("Rejected event with empty title")
            raise ValidationError("title must not be empty")

    @staticmethod
    def _validate_times(start: datetime, end: datetime, all_day: bool) -> None:
        if end < start:
            logger.warning("Rejected event ending before it starts: %s < %s", end, start)
            raise ValidationError("end_time must not be before start_time")
        if all_day and end == start:
            raise ValidationError("all-day events must have a non-zero duration")

    def _validate_event(self, event: CalendarEvent) -> None:
        self._validate_title(event.title)
        self._validate_times(event.start_time, event.end_time, event.all_day)
        if not unique_attendee_ids(event.attendees):
            raise ValidationError(f"Event {event.id} lists an attendee more than once")

    def _prepare_update(self, event: CalendarEvent, changes: Dict[str, Any]) -> Dict[str, Any]:
        changes = deepcopy(changes)
        tz = self.context.tz
        for name in ("start_time", "end_time"):
            if name in changes:
                changes[name] = localize(changes[name], tz)
        if "title" in changes:
            self._validate_title(changes["title"])
        self._validate_times(
            changes.get("start_time", event.start_time),
            changes.get("end_time", event.end_time),
            changes.get("all_day", event.all_day),
        )
        if "attendees" in changes and not unique_attendee_ids(changes["attendees"]):
            raise ValidationError(f"Event {event.id} lists an attendee more than once")
        return changes

    def _commit_update(self, event: CalendarEvent, changes: Dict[str, Any], modified_by: str) -> None:
        for name, value in changes.items():
            setattr(event, name, value)
        # Touch even when nothing changed so sync consumers see the write.
        event.last_modified = self._stamp()
        event.last_modified_by = modified_by
        logger.info("Updated event %s (%s)", event.id, ", ".join(sorted(changes)) or "touch")
        self.context.notify(event, ChangeAction.UPDATED)


__all__ = ["CalendarStateMachine", "EventUpdate"]
