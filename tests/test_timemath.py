"""Tests for pure time arithmetic."""

from datetime import datetime

import pytest

from dayplan.core.timemath import (
    clamp,
    format_clock,
    format_duration,
    format_elapsed,
    format_hour_marker,
    is_valid_hhmm,
    minutes_to_12_hour,
    overlap_minutes,
    round_half_up,
    snap_to_grid,
    to_12_hour,
    to_hhmm,
    to_minutes,
)


class TestConversions:
    @pytest.mark.parametrize("hhmm", ["00:00", "00:01", "09:30", "12:00", "23:59"])
    def test_round_trip(self, hhmm):
        assert to_hhmm(to_minutes(hhmm)) == hhmm

    def test_round_trip_every_minute(self):
        for minutes in range(24 * 60):
            assert to_minutes(to_hhmm(minutes)) == minutes

    def test_to_minutes(self):
        assert to_minutes("14:07") == 847

    def test_to_hhmm_pads(self):
        assert to_hhmm(5) == "00:05"
        assert to_hhmm(545) == "09:05"

    def test_to_hhmm_wraps_past_midnight(self):
        assert to_hhmm(1440 + 30) == "00:30"


class TestValidation:
    @pytest.mark.parametrize("value", ["00:00", "23:59", "07:45"])
    def test_valid(self, value):
        assert is_valid_hhmm(value) is True

    @pytest.mark.parametrize("value", ["", "7:45", "24:00", "12:60", "12-30", "ab:cd", None, "12:300"])
    def test_invalid(self, value):
        assert is_valid_hhmm(value) is False


class TestTwelveHour:
    def test_midnight(self):
        assert to_12_hour("00:00") == "12:00 AM"

    def test_noon(self):
        assert to_12_hour("12:00") == "12:00 PM"

    def test_afternoon_has_no_leading_zero(self):
        assert to_12_hour("14:05") == "2:05 PM"

    def test_morning(self):
        assert minutes_to_12_hour(9 * 60 + 30) == "9:30 AM"

    def test_hour_marker(self):
        assert format_hour_marker(0) == "12AM"
        assert format_hour_marker(9) == "9AM"
        assert format_hour_marker(12) == "12PM"
        assert format_hour_marker(23) == "11PM"

    def test_format_clock(self):
        assert format_clock(datetime(2025, 1, 15, 13, 4, 9)) == "1:04:09 PM"


class TestOverlap:
    def test_partial(self):
        assert overlap_minutes(0, 60, 30, 90) == 30

    def test_symmetric(self):
        assert overlap_minutes(0, 60, 30, 90) == overlap_minutes(30, 90, 0, 60)

    def test_disjoint(self):
        assert overlap_minutes(0, 60, 60, 120) == 0
        assert overlap_minutes(100, 200, 0, 50) == 0

    def test_self_overlap_is_length(self):
        assert overlap_minutes(540, 600, 540, 600) == 60

    def test_containment(self):
        assert overlap_minutes(540, 1380, 570, 1050) == 480


class TestFormatting:
    def test_duration_hours_and_minutes(self):
        assert format_duration(90) == "1h 30m"

    def test_duration_whole_hours(self):
        assert format_duration(120) == "2h"

    def test_duration_minutes_only(self):
        assert format_duration(45) == "45m"

    def test_duration_zero(self):
        assert format_duration(0) == "0m"

    def test_elapsed_under_hour(self):
        assert format_elapsed(65) == "1:05"

    def test_elapsed_over_hour(self):
        assert format_elapsed(3600 + 2 * 60 + 3) == "1:02:03"

    def test_elapsed_never_negative(self):
        assert format_elapsed(-5) == "0:00"


class TestSnapping:
    def test_rounds_down(self):
        assert snap_to_grid(847) == 840

    def test_rounds_up(self):
        assert snap_to_grid(853) == 855

    def test_half_rounds_up(self):
        assert snap_to_grid(7.5) == 15
        assert round_half_up(0.5) == 1

    def test_clamps_to_latest_start(self):
        assert snap_to_grid(1439) == 23 * 60 + 45

    def test_clamps_to_midnight(self):
        assert snap_to_grid(-10) == 0

    def test_clamp(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2
