#!/usr/bin/env python3
"""Tests for MaintenanceSchedule and IntervalType."""
from datetime import date

import pytest
from maintenance import ConfigurationError, IntervalType, MaintenanceSchedule


def make_schedule(**overrides):
    fields = dict(
        schedule_id="oil",
        organisation_id="acme",
        asset_id="truck-7",
        interval_type="monthly",
        start_date=date(2025, 1, 15),
    )
    fields.update(overrides)
    return MaintenanceSchedule(**fields)


class TestIntervalType:
    """Tests for IntervalType.parse."""

    def test_parses_string(self):
        assert IntervalType.parse("quarterly") == IntervalType.QUARTERLY

    def test_passes_enum_through(self):
        assert IntervalType.parse(IntervalType.CUSTOM) is IntervalType.CUSTOM

    def test_unknown_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            IntervalType.parse("hourly")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            IntervalType.parse(None)


class TestValidate:
    """Tests for MaintenanceSchedule.validate."""

    def test_valid_schedule_passes(self):
        schedule = make_schedule(day_of_month=31, interval_mileage=5000)
        schedule.validate()
        assert schedule.interval_type == IntervalType.MONTHLY

    @pytest.mark.parametrize("overrides", [
        {"interval_type": "fortnightly"},
        {"interval_value": 0},
        {"interval_value": -2},
        {"interval_value": "2"},
        {"interval_value": 1.5},
        {"day_of_week": 7},
        {"day_of_week": -1},
        {"day_of_month": 0},
        {"day_of_month": 32},
        {"month_of_year": 13},
        {"month_of_year": 0},
        {"lead_time_days": -1},
        {"interval_mileage": 0},
        {"interval_hours": -10},
        {"start_date": None},
        {"lead_time_days": "7"},
        {"lead_time_days": True},
        {"interval_mileage": "lots"},
        {"interval_hours": "250"},
        {"last_triggered_mileage": "10000"},
        {"last_triggered_hours": [500]},
        {"end_date": "2025-12-31"},
        {"end_date": date(2024, 12, 31)},
    ])
    def test_rejects_malformed(self, overrides):
        with pytest.raises(ConfigurationError):
            make_schedule(**overrides).validate()

    def test_end_date_equal_to_start_allowed(self):
        make_schedule(end_date=date(2025, 1, 15)).validate()


class TestCreate:
    """Tests for MaintenanceSchedule.create."""

    def test_first_due_date_follows_start(self):
        schedule = MaintenanceSchedule.create(
            "oil", "acme", "truck-7", "monthly", date(2025, 1, 15), day_of_month=20
        )
        assert schedule.next_due_date == date(2025, 2, 20)

    def test_keeps_explicit_next_due_date(self):
        schedule = MaintenanceSchedule.create(
            "oil", "acme", "truck-7", "monthly", date(2025, 1, 15),
            next_due_date=date(2025, 6, 15),
        )
        assert schedule.next_due_date == date(2025, 6, 15)

    def test_rejects_invalid(self):
        with pytest.raises(ConfigurationError):
            MaintenanceSchedule.create("oil", "acme", "truck-7", "monthly", date(2025, 1, 15),
                                       day_of_month=40)


class TestDefaults:
    """Tests for defaults and derived properties."""

    def test_defaults(self):
        schedule = make_schedule()
        assert schedule.interval_value == 1
        assert schedule.lead_time_days == 7
        assert schedule.threshold_alert_percent == 90
        assert schedule.is_active is True
        assert schedule.name == "oil"

    def test_has_usage_triggers(self):
        assert not make_schedule().has_usage_triggers
        assert make_schedule(interval_mileage=5000).has_usage_triggers
        assert make_schedule(interval_hours=250).has_usage_triggers

    def test_next_after(self):
        schedule = make_schedule(interval_type="quarterly", day_of_month=31)
        assert schedule.next_after(date(2025, 1, 31)) == date(2025, 4, 30)
