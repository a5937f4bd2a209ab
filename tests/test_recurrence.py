#!/usr/bin/env python3
"""Tests for calendar recurrence calculations."""
import calendar
from datetime import date, timedelta

import pytest
from maintenance import (
    ConfigurationError,
    IntervalType,
    MaintenanceSchedule,
    Occurrence,
    calculate_next_due_date,
    preview_schedule_occurrences,
)


def sunday_index(d: date) -> int:
    """Day of week with Sunday=0..Saturday=6."""
    return (d.weekday() + 1) % 7


def add_months(d: date, months: int):
    """(year, month) that lies `months` calendar months after d."""
    total = d.year * 12 + (d.month - 1) + months
    return total // 12, total % 12 + 1


class TestDaily:
    """Tests for daily and custom intervals."""

    def test_one_day(self):
        assert calculate_next_due_date("daily", 1, date(2025, 1, 15)) == date(2025, 1, 16)

    def test_every_three_days(self):
        assert calculate_next_due_date("daily", 3, date(2025, 1, 15)) == date(2025, 1, 18)

    def test_crosses_month_boundary(self):
        assert calculate_next_due_date("daily", 5, date(2025, 1, 30)) == date(2025, 2, 4)

    def test_adds_exactly_n_days(self):
        """daily n from d is always d + n days."""
        start = date(2023, 12, 25)
        for n in range(1, 400, 7):
            assert calculate_next_due_date("daily", n, start) == start + timedelta(days=n)

    def test_custom_is_day_count(self):
        assert calculate_next_due_date("custom", 45, date(2025, 1, 1)) == date(2025, 2, 15)

    def test_accepts_enum(self):
        assert calculate_next_due_date(IntervalType.DAILY, 2, date(2025, 1, 1)) == date(2025, 1, 3)


class TestWeekly:
    """Tests for weekly intervals and day-of-week anchoring."""

    def test_one_week(self):
        assert calculate_next_due_date("weekly", 1, date(2025, 1, 15)) == date(2025, 1, 22)

    def test_two_weeks(self):
        assert calculate_next_due_date("weekly", 2, date(2025, 1, 15)) == date(2025, 1, 29)

    def test_adjusts_to_friday(self):
        """Wednesday + 1 week, anchored to Friday of that week."""
        result = calculate_next_due_date("weekly", 1, date(2025, 1, 15), day_of_week=5)
        assert sunday_index(result) == 5
        assert result == date(2025, 1, 24)

    def test_sunday_is_start_of_week(self):
        """Sunday anchor moves back to the Sunday opening the advanced week."""
        result = calculate_next_due_date("weekly", 1, date(2025, 1, 15), day_of_week=0)
        assert sunday_index(result) == 0
        assert result == date(2025, 1, 19)

    def test_saturday_is_end_of_week(self):
        result = calculate_next_due_date("weekly", 1, date(2025, 1, 15), day_of_week=6)
        assert sunday_index(result) == 6
        assert result == date(2025, 1, 25)

    def test_anchor_stays_in_week_of_advanced_date(self):
        """Result is the requested weekday and within the advanced date's Sunday week."""
        start = date(2024, 12, 1)
        for offset in range(21):
            from_date = start + timedelta(days=offset)
            for interval in (1, 2):
                base = from_date + timedelta(weeks=interval)
                week_start = base - timedelta(days=sunday_index(base))
                for dow in range(7):
                    result = calculate_next_due_date("weekly", interval, from_date, day_of_week=dow)
                    assert sunday_index(result) == dow
                    assert week_start <= result < week_start + timedelta(days=7)
                    assert result > from_date


class TestMonthly:
    """Tests for monthly intervals and day-of-month clamping."""

    def test_one_month(self):
        assert calculate_next_due_date("monthly", 1, date(2025, 1, 15)) == date(2025, 2, 15)

    def test_three_months(self):
        assert calculate_next_due_date("monthly", 3, date(2025, 1, 15)) == date(2025, 4, 15)

    def test_sets_day_of_month(self):
        result = calculate_next_due_date("monthly", 1, date(2025, 1, 15), day_of_month=20)
        assert result == date(2025, 2, 20)

    def test_clamps_to_february_non_leap(self):
        result = calculate_next_due_date("monthly", 1, date(2025, 1, 28), day_of_month=31)
        assert result == date(2025, 2, 28)

    def test_clamps_to_february_leap(self):
        result = calculate_next_due_date("monthly", 1, date(2024, 1, 28), day_of_month=31)
        assert result == date(2024, 2, 29)

    def test_clamps_to_thirty_day_month(self):
        result = calculate_next_due_date("monthly", 1, date(2025, 3, 31), day_of_month=31)
        assert result == date(2025, 4, 30)

    def test_keeps_original_day_clamped(self):
        """Without dayOfMonth, Jan 31 rolls to Feb 28, never into March."""
        assert calculate_next_due_date("monthly", 1, date(2025, 1, 31)) == date(2025, 2, 28)

    def test_year_carry(self):
        assert calculate_next_due_date("monthly", 1, date(2025, 12, 15)) == date(2026, 1, 15)
        assert calculate_next_due_date("monthly", 14, date(2025, 11, 15)) == date(2027, 1, 15)


class TestQuarterly:
    """Tests for quarterly intervals."""

    def test_one_quarter(self):
        assert calculate_next_due_date("quarterly", 1, date(2025, 1, 15)) == date(2025, 4, 15)

    def test_two_quarters(self):
        assert calculate_next_due_date("quarterly", 2, date(2025, 1, 15)) == date(2025, 7, 15)

    def test_clamps_across_year(self):
        result = calculate_next_due_date("quarterly", 1, date(2025, 11, 30), day_of_month=31)
        assert result == date(2026, 2, 28)


class TestAnnually:
    """Tests for annual intervals with month/day anchors."""

    def test_one_year(self):
        assert calculate_next_due_date("annually", 1, date(2025, 1, 15)) == date(2026, 1, 15)

    def test_leap_day_anchor_rolls_to_feb_28(self):
        result = calculate_next_due_date(
            "annually", 1, date(2024, 2, 29), day_of_month=29, month_of_year=2
        )
        assert result == date(2025, 2, 28)

    def test_leap_day_anchor_returns_in_leap_year(self):
        result = calculate_next_due_date(
            "annually", 1, date(2027, 2, 28), day_of_month=29, month_of_year=2
        )
        assert result == date(2028, 2, 29)

    def test_leap_day_without_anchors(self):
        assert calculate_next_due_date("annually", 1, date(2024, 2, 29)) == date(2025, 2, 28)

    def test_month_of_year(self):
        result = calculate_next_due_date("annually", 1, date(2025, 1, 15), month_of_year=6)
        assert result == date(2026, 6, 15)

    def test_day_clamped_to_target_month(self):
        result = calculate_next_due_date(
            "annually", 1, date(2025, 1, 31), day_of_month=31, month_of_year=4
        )
        assert result == date(2026, 4, 30)


class TestNoRollover:
    """Day-of-month anchors never roll into an adjacent month."""

    @pytest.mark.parametrize("interval_type,interval_value,months", [
        ("monthly", 1, 1),
        ("monthly", 2, 2),
        ("quarterly", 1, 3),
        ("annually", 1, 12),
    ])
    def test_day_clamped_in_intended_month(self, interval_type, interval_value, months):
        for year in (2023, 2024):
            for month in range(1, 13):
                from_date = date(year, month, 28)
                target_year, target_month = add_months(from_date, months)
                last_day = calendar.monthrange(target_year, target_month)[1]
                for day_of_month in range(1, 32):
                    result = calculate_next_due_date(
                        interval_type, interval_value, from_date, day_of_month=day_of_month
                    )
                    assert (result.year, result.month) == (target_year, target_month)
                    assert result.day == min(day_of_month, last_day)


class TestUnknownType:
    """Tests for interval type parsing."""

    def test_unknown_raises_configuration_error(self):
        with pytest.raises(ConfigurationError):
            calculate_next_due_date("fortnightly", 1, date(2025, 1, 1))

    def test_case_insensitive(self):
        assert calculate_next_due_date("Monthly", 1, date(2025, 1, 15)) == date(2025, 2, 15)


class TestPreviewScheduleOccurrences:
    """Tests for preview_schedule_occurrences."""

    @pytest.fixture
    def monthly(self):
        return {
            "interval_type": "monthly",
            "interval_value": 1,
            "start_date": date(2025, 1, 15),
            "lead_time_days": 7,
        }

    def test_stops_at_end_date(self, monthly):
        """Only February fits before endDate; March is past it."""
        config = dict(monthly, end_date=date(2025, 3, 1))
        assert preview_schedule_occurrences(config) == [
            Occurrence(due_date=date(2025, 2, 15), lead_date=date(2025, 2, 8))
        ]

    def test_default_count_is_ten(self, monthly):
        occurrences = preview_schedule_occurrences(monthly)
        assert len(occurrences) == 10
        assert occurrences[-1].due_date == date(2025, 11, 15)

    def test_custom_count(self, monthly):
        assert len(preview_schedule_occurrences(monthly, count=3)) == 3

    def test_zero_count(self, monthly):
        assert preview_schedule_occurrences(monthly, count=0) == []

    def test_end_date_is_inclusive(self):
        config = {
            "interval_type": "daily",
            "interval_value": 1,
            "start_date": date(2025, 1, 1),
            "end_date": date(2025, 1, 3),
            "lead_time_days": 0,
        }
        due = [o.due_date for o in preview_schedule_occurrences(config)]
        assert due == [date(2025, 1, 2), date(2025, 1, 3)]

    def test_empty_when_first_due_past_end(self, monthly):
        config = dict(monthly, end_date=date(2025, 2, 1))
        assert preview_schedule_occurrences(config) == []

    def test_lead_date_is_due_minus_lead_days(self, monthly):
        for occ in preview_schedule_occurrences(monthly, count=5):
            assert occ.due_date - occ.lead_date == timedelta(days=7)

    def test_chains_from_previous_due_date(self):
        """Each step starts from the previous due date, so a clamped day carries forward."""
        config = {
            "interval_type": "monthly",
            "interval_value": 1,
            "start_date": date(2025, 1, 31),
            "lead_time_days": 0,
        }
        due = [o.due_date for o in preview_schedule_occurrences(config, count=3)]
        assert due == [date(2025, 2, 28), date(2025, 3, 28), date(2025, 4, 28)]

    def test_day_of_month_anchor_recovers_after_clamp(self):
        config = {
            "interval_type": "monthly",
            "interval_value": 1,
            "start_date": date(2025, 1, 31),
            "day_of_month": 31,
            "lead_time_days": 0,
        }
        due = [o.due_date for o in preview_schedule_occurrences(config, count=3)]
        assert due == [date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]

    def test_restartable(self, monthly):
        assert preview_schedule_occurrences(monthly, 4) == preview_schedule_occurrences(monthly, 4)

    def test_accepts_schedule(self):
        schedule = MaintenanceSchedule(
            "s1", "org", "asset", "weekly", date(2025, 1, 15),
            day_of_week=5, lead_time_days=2,
        )
        occurrences = preview_schedule_occurrences(schedule, count=2)
        assert occurrences[0] == Occurrence(date(2025, 1, 24), date(2025, 1, 22))
        assert occurrences[1] == Occurrence(date(2025, 1, 31), date(2025, 1, 29))
