from __future__ import annotations

from typing import Iterable, List

from ..domain import CalendarEvent, FilterCriteria


def matches(event: CalendarEvent, criteria: FilterCriteria) -> bool:
    if criteria.attendee_ids and not any(
        attendee.id in criteria.attendee_ids for attendee in event.attendees
    ):
        return False
    # Any declined attendee hides the event, not only the viewer's own RSVP.
    if criteria.hide_declined and event.has_declined_attendee():
        return False
    if criteria.event_types and event.type not in criteria.event_types:
        return False
    return True


def apply_filters(events: Iterable[CalendarEvent], criteria: FilterCriteria) -> List[CalendarEvent]:
    """Stable filter: survivors keep their input order."""

    if criteria.is_unconstrained:
        return list(events)
    return [event for event in events if matches(event, criteria)]


__all__ = ["apply_filters", "matches"]
