from __future__ import annotations

from datetime import tzinfo
from typing import Dict, List, Sequence, Set

from ..domain import CalendarEvent
from .time_range import UTC, date_range, localize


def spans_multiple_days(event: CalendarEvent, tz: tzinfo = UTC) -> bool:
    if event.all_day:
        return True
    return localize(event.start_time, tz).date() != localize(event.end_time, tz).date()


def index_by_day(events: Sequence[CalendarEvent], *, tz: tzinfo = UTC) -> Dict[str, List[CalendarEvent]]:
    """Bucket ``events`` by the day keys they touch.

    Spanning and all-day events land under every day from start to end
    inclusive. Buckets keep input order and hold each event id at most once.
    """

    days_index: Dict[str, List[CalendarEvent]] = {}
    seen: Dict[str, Set[str]] = {}

    def _place(key: str, event: CalendarEvent) -> None:
        bucket_ids = seen.setdefault(key, set())
        if event.id in bucket_ids:
            return
        bucket_ids.add(event.id)
        days_index.setdefault(key, []).append(event)

    for event in events:
        start_day = localize(event.start_time, tz).date()
        if not spans_multiple_days(event, tz):
            _place(start_day.isoformat(), event)
            continue
        end_day = localize(event.end_time, tz).date()
        for day in date_range(start_day, end_day):
            _place(day.isoformat(), event)
    return days_index


__all__ = ["index_by_day", "spans_multiple_days"]
