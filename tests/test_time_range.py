"""Tests for visible-window and navigation arithmetic."""

import calendar
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from calm_calendar.core import ValidationError
from calm_calendar.domain import NavigationDirection, ViewMode
from calm_calendar.scheduling.time_range import (
    add_months,
    compute_range,
    day_key,
    last_day_of_month,
    shift_anchor,
    week_start,
)

UTC = timezone.utc
NEW_YORK = ZoneInfo("America/New_York")


class TestComputeRange:
    """Tests for compute_range."""

    @pytest.mark.parametrize("view", list(ViewMode))
    @pytest.mark.parametrize(
        "anchor",
        [
            datetime(2025, 1, 1, 0, 0, tzinfo=UTC),
            datetime(2024, 2, 29, 23, 59, tzinfo=UTC),
            datetime(2025, 12, 31, 12, 0, tzinfo=UTC),
        ],
    )
    def test_start_never_after_end(self, anchor, view):
        """Every view yields start <= end."""
        window = compute_range(anchor, view)
        assert window.start <= window.end

    def test_day_view(self):
        """Day view covers the anchor's calendar day."""
        window = compute_range(datetime(2025, 8, 5, 14, 30, tzinfo=UTC), ViewMode.DAY)

        assert window.start == datetime(2025, 8, 5, 0, 0, tzinfo=UTC)
        assert window.end == datetime(2025, 8, 5, 23, 59, 59, 999000, tzinfo=UTC)

    def test_week_view_starts_on_sunday(self):
        """Week view runs from the previous Sunday through Saturday."""
        window = compute_range(datetime(2025, 8, 6, 9, 0, tzinfo=UTC), "week")

        assert window.start == datetime(2025, 8, 3, 0, 0, tzinfo=UTC)
        assert window.end == datetime(2025, 8, 9, 23, 59, 59, 999000, tzinfo=UTC)

    @pytest.mark.parametrize("offset", range(14))
    def test_week_always_seven_days_from_sunday(self, offset):
        """Week windows start on a Sunday and span seven calendar days."""
        anchor = datetime(2025, 12, 25, 8, 0, tzinfo=UTC) + timedelta(days=offset)
        window = compute_range(anchor, ViewMode.WEEK)

        assert window.start.weekday() == 6
        assert (window.end.date() - window.start.date()).days == 6
        assert window.start <= anchor <= window.end

    def test_week_anchor_on_sunday(self):
        """A Sunday anchor starts its own week."""
        window = compute_range(datetime(2025, 8, 3, 18, 0, tzinfo=UTC), ViewMode.WEEK)
        assert window.start.date() == date(2025, 8, 3)

    @pytest.mark.parametrize("year", [2023, 2024])
    @pytest.mark.parametrize("month", range(1, 13))
    def test_month_ends_on_last_calendar_day(self, year, month):
        """Month windows end on the true last day for leap and common years."""
        window = compute_range(datetime(year, month, 10, tzinfo=UTC), ViewMode.MONTH)

        assert window.start.date() == date(year, month, 1)
        assert window.end.day == calendar.monthrange(year, month)[1]
        assert window.end.time().microsecond == 999000

    def test_february_leap_years(self):
        """February ends on the 29th only in leap years."""
        assert compute_range(datetime(2024, 2, 10, tzinfo=UTC), "month").end.day == 29
        assert compute_range(datetime(2023, 2, 10, tzinfo=UTC), "month").end.day == 28

    def test_agenda_view_covers_thirty_days(self):
        """Agenda view runs from the anchor day through thirty days later."""
        window = compute_range(datetime(2025, 8, 6, 9, 0, tzinfo=UTC), ViewMode.AGENDA)

        assert window.start == datetime(2025, 8, 6, 0, 0, tzinfo=UTC)
        assert window.end == datetime(2025, 9, 5, 23, 59, 59, 999000, tzinfo=UTC)

    def test_agenda_days_configurable(self):
        """The agenda length follows the agenda_days argument."""
        window = compute_range(datetime(2025, 8, 6, tzinfo=UTC), ViewMode.AGENDA, agenda_days=7)
        assert window.end.date() == date(2025, 8, 13)

    def test_naive_anchor_is_workspace_wall_clock(self):
        """Naive anchors are read as wall-clock time in the workspace zone."""
        window = compute_range(datetime(2025, 3, 1, 23, 30), ViewMode.DAY, tz=NEW_YORK)

        assert window.start == datetime(2025, 3, 1, 0, 0, tzinfo=NEW_YORK)
        assert window.end.date() == date(2025, 3, 1)

    def test_aware_anchor_converted_into_workspace_zone(self):
        """An aware anchor is converted before the calendar day is taken."""
        window = compute_range(datetime(2025, 3, 2, 3, 0, tzinfo=UTC), ViewMode.DAY, tz=NEW_YORK)
        assert window.start.date() == date(2025, 3, 1)

    def test_daylight_saving_day_keeps_wall_clock_bounds(self):
        """Clock-shift days still run 00:00 to 23:59:59.999 local."""
        window = compute_range(datetime(2025, 3, 9, 12, 0, tzinfo=NEW_YORK), ViewMode.DAY, tz=NEW_YORK)

        assert (window.start.hour, window.start.minute) == (0, 0)
        assert (window.end.hour, window.end.minute, window.end.second) == (23, 59, 59)
        assert window.start.date() == window.end.date() == date(2025, 3, 9)

    def test_unknown_view_rejected(self):
        """An unrecognised view mode raises ValidationError."""
        with pytest.raises(ValidationError):
            compute_range(datetime(2025, 8, 6, tzinfo=UTC), "fortnight")


class TestHelpers:
    """Tests for the date helpers."""

    def test_last_day_of_december(self):
        """December rolls over into the next year correctly."""
        assert last_day_of_month(2025, 12) == date(2025, 12, 31)

    def test_week_start(self):
        """week_start returns the Sunday on or before the date."""
        assert week_start(date(2025, 8, 9)) == date(2025, 8, 3)
        assert week_start(date(2025, 8, 10)) == date(2025, 8, 10)

    def test_day_key_uses_workspace_zone(self):
        """Day keys follow the workspace timezone."""
        moment = datetime(2025, 8, 5, 2, 0, tzinfo=UTC)

        assert day_key(moment) == "2025-08-05"
        assert day_key(moment, NEW_YORK) == "2025-08-04"

    def test_add_months_clamps_day(self):
        """Shifting from the 31st clamps to the target month's length."""
        assert add_months(datetime(2025, 1, 31, tzinfo=UTC), 1).date() == date(2025, 2, 28)
        assert add_months(datetime(2024, 1, 31, tzinfo=UTC), 1).date() == date(2024, 2, 29)
        assert add_months(datetime(2025, 3, 31, tzinfo=UTC), -1).date() == date(2025, 2, 28)

    def test_add_months_crosses_year(self):
        """Month shifts wrap across year boundaries both ways."""
        assert add_months(datetime(2025, 12, 15, tzinfo=UTC), 1).date() == date(2026, 1, 15)
        assert add_months(datetime(2026, 1, 15, tzinfo=UTC), -1).date() == date(2025, 12, 15)


class TestShiftAnchor:
    """Tests for navigation steps."""

    @pytest.mark.parametrize(
        "view, expected",
        [
            (ViewMode.DAY, date(2025, 8, 7)),
            (ViewMode.WEEK, date(2025, 8, 13)),
            (ViewMode.MONTH, date(2025, 9, 6)),
            (ViewMode.AGENDA, date(2025, 9, 5)),
        ],
    )
    def test_next_step_per_view(self, view, expected):
        """Each view advances by its own step."""
        anchor = datetime(2025, 8, 6, 9, 0, tzinfo=UTC)
        assert shift_anchor(anchor, view, NavigationDirection.NEXT).date() == expected

    def test_time_of_day_preserved(self):
        """Navigation keeps the anchor's wall-clock time."""
        anchor = datetime(2025, 3, 8, 9, 15, tzinfo=NEW_YORK)
        shifted = shift_anchor(anchor, ViewMode.DAY, "next", tz=NEW_YORK)

        assert shifted.date() == date(2025, 3, 9)
        assert (shifted.hour, shifted.minute) == (9, 15)

    def test_unknown_direction_rejected(self):
        """An unrecognised direction raises ValidationError."""
        with pytest.raises(ValidationError):
            shift_anchor(datetime(2025, 8, 6, tzinfo=UTC), ViewMode.DAY, "sideways")
