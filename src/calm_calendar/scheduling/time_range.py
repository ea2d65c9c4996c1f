"""Visible-window arithmetic for the calendar views.

All arithmetic happens on wall-clock values in a single workspace timezone.
Naive datetimes are read as wall-clock time in that zone; aware ones are
converted into it first. Daylight-saving shifts are not special-cased.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Union

from ..core.errors import ValidationError
from ..domain import NavigationDirection, TimeRange, ViewMode

UTC = timezone.utc
END_OF_DAY = time(23, 59, 59, 999000)
DEFAULT_AGENDA_DAYS = 30


def parse_view(value: Union[ViewMode, str]) -> ViewMode:
    try:
        return ViewMode(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown view mode: {value!r}") from exc


def parse_direction(value: Union[NavigationDirection, str]) -> NavigationDirection:
    try:
        return NavigationDirection(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown navigation direction: {value!r}") from exc


def localize(value: datetime, tz: tzinfo = UTC) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def day_key(value: datetime, tz: tzinfo = UTC) -> str:
    """Calendar-date key (``YYYY-MM-DD``) of ``value`` in the workspace timezone."""

    return localize(value, tz).date().isoformat()


def date_range(start: date, end: date) -> Iterable[date]:
    delta = (end - start).days
    for index in range(delta + 1):
        yield start + timedelta(days=index)


def start_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=tz)


def last_day_of_month(year: int, month: int) -> date:
    # Day zero of the following month.
    first_of_next = date(year + month // 12, month % 12 + 1, 1)
    return first_of_next - timedelta(days=1)


def week_start(day: date) -> date:
    """The Sunday on or before ``day``."""

    return day - timedelta(days=(day.weekday() + 1) % 7)


def compute_range(
    anchor: datetime,
    view: Union[ViewMode, str],
    *,
    tz: tzinfo = UTC,
    agenda_days: int = DEFAULT_AGENDA_DAYS,
) -> TimeRange:
    view = parse_view(view)
    local_day = localize(anchor, tz).date()

    if view is ViewMode.DAY:
        first, last = local_day, local_day
    elif view is ViewMode.WEEK:
        first = week_start(local_day)
        last = first + timedelta(days=6)
    elif view is ViewMode.MONTH:
        first = local_day.replace(day=1)
        last = last_day_of_month(local_day.year, local_day.month)
    else:
        first = local_day
        last = local_day + timedelta(days=agenda_days)

    return TimeRange(start=start_of_day(first, tz), end=end_of_day(last, tz))


def add_months(value: datetime, months: int) -> datetime:
    """Calendar-month shift that clamps the day to the target month's length."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, last_day_of_month(year, month).day)
    return value.replace(year=year, month=month, day=day)


def shift_anchor(
    anchor: datetime,
    view: Union[ViewMode, str],
    direction: Union[NavigationDirection, str],
    *,
    tz: tzinfo = UTC,
    agenda_days: int = DEFAULT_AGENDA_DAYS,
) -> datetime:
    view = parse_view(view)
    sign = 1 if parse_direction(direction) is NavigationDirection.NEXT else -1
    local = localize(anchor, tz)

    if view is ViewMode.MONTH:
        return add_months(local, sign)
    step = {ViewMode.DAY: 1, ViewMode.WEEK: 7, ViewMode.AGENDA: agenda_days}[view]
    return local + timedelta(days=sign * step)


__all__ = [
    "UTC",
    "add_months",
    "compute_range",
    "date_range",
    "day_key",
    "end_of_day",
    "last_day_of_month",
    "localize",
    "parse_direction",
    "parse_view",
    "shift_anchor",
    "start_of_day",
    "week_start",
]
