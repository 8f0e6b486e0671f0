"""Tests for time helpers and lead-time policy checks."""

from datetime import datetime, timedelta, timezone

import pytest

from office_hours.clock import (
    combine_date_time,
    format_date,
    format_short_date,
    format_time,
    format_time_range,
    hours_until,
    is_booking_allowed,
    is_cancellation_allowed,
    is_past,
    parse_iso,
    ranges_overlap,
    relative_time,
    to_iso,
)
from tests.conftest import at

START = at(10)


class TestParseIso:
    def test_z_suffix_is_utc(self):
        assert parse_iso("2025-11-25T10:00:00Z") == START

    def test_naive_string_assumed_utc(self):
        assert parse_iso("2025-11-25T10:00:00") == START

    def test_offset_preserved_as_instant(self):
        assert parse_iso("2025-11-25T11:00:00+01:00") == START

    def test_datetime_passthrough(self):
        assert parse_iso(START) is START

    def test_to_iso_normalizes_to_utc(self):
        assert to_iso("2025-11-25T11:00:00+01:00") == "2025-11-25T10:00:00+00:00"


class TestRangesOverlap:
    def test_touching_ranges_do_not_overlap(self):
        assert not ranges_overlap(at(10), at(11), at(11), at(12))

    def test_partial_overlap(self):
        assert ranges_overlap(at(10), at(11), at(10, 30), at(11, 30))

    def test_containment(self):
        assert ranges_overlap(at(9), at(12), at(10), at(11))

    def test_identical_ranges(self):
        assert ranges_overlap(at(10), at(11), at(10), at(11))

    def test_symmetric(self):
        assert ranges_overlap(at(10, 30), at(11, 30), at(10), at(11))

    def test_disjoint(self):
        assert not ranges_overlap(at(8), at(9), at(10), at(11))

    def test_accepts_strings(self):
        assert ranges_overlap("2025-11-25T10:00Z", "2025-11-25T11:00Z", at(10, 59), at(12))


class TestHoursUntil:
    def test_future(self):
        assert hours_until(START, START - timedelta(hours=3)) == pytest.approx(3.0)

    def test_past_is_negative(self):
        assert hours_until(START, START + timedelta(minutes=90)) == pytest.approx(-1.5)


class TestBookingWindow:
    def test_61_minutes_before_allowed(self):
        assert is_booking_allowed(START, START - timedelta(minutes=61))

    def test_exactly_60_minutes_rejected(self):
        assert not is_booking_allowed(START, START - timedelta(minutes=60))

    def test_30_minutes_rejected(self):
        assert not is_booking_allowed(START, START - timedelta(minutes=30))

    def test_custom_window(self):
        assert not is_booking_allowed(START, START - timedelta(hours=2), window_hours=2)


class TestCancellationWindow:
    def test_25_hours_before_allowed(self):
        assert is_cancellation_allowed(START, START - timedelta(hours=25))

    def test_exactly_24_hours_rejected(self):
        assert not is_cancellation_allowed(START, START - timedelta(hours=24))

    def test_23_hours_rejected(self):
        assert not is_cancellation_allowed(START, START - timedelta(hours=23))


class TestIsPast:
    def test_ended_slot_is_past(self):
        assert is_past(at(11), at(11, 1))

    def test_slot_ending_now_is_not_past(self):
        assert not is_past(at(11), at(11))


class TestFormatting:
    def test_format_date(self):
        assert format_date(START) == "Tuesday, November 25, 2025"

    def test_format_short_date(self):
        assert format_short_date(at(10, day=5)) == "Nov 5, 2025"

    def test_format_time_morning(self):
        assert format_time(START) == "10:00 AM"

    def test_format_time_noon_and_midnight(self):
        assert format_time(at(12)) == "12:00 PM"
        assert format_time(at(0, 5)) == "12:05 AM"

    def test_format_time_range(self):
        assert format_time_range(at(14), at(15, 30)) == "2:00 PM - 3:30 PM"

    def test_combine_date_time(self):
        assert combine_date_time("2025-11-25", "10:00") == START


class TestRelativeTime:
    @pytest.mark.parametrize(
        "offset,expected",
        [
            (timedelta(minutes=30), "in less than 1 hour"),
            (timedelta(hours=3, minutes=20), "in 3 hours"),
            (timedelta(days=2, hours=1), "in 2 days"),
            (timedelta(days=9), "in over a week"),
            (timedelta(hours=-5), "5 hours ago"),
            (timedelta(days=-3), "3 days ago"),
            (timedelta(days=-10), "over a week ago"),
        ],
    )
    def test_descriptions(self, offset, expected):
        now = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)
        assert relative_time(now + offset, now) == expected
