"""MaintenanceSchedule class for recurring maintenance obligations."""

from datetime import date, datetime
from typing import Optional, Union

from .errors import ConfigurationError
from .interval_type import IntervalType
from .recurrence import calculate_next_due_date


class MaintenanceSchedule:
    """A recurring maintenance obligation for one asset."""

    def __init__(
            self,
            schedule_id: str,
            organisation_id: str,
            asset_id: str,
            interval_type: Union[IntervalType, str],
            start_date: date,
            interval_value: int = 1,
            name: Optional[str] = None,
            day_of_week: Optional[int] = None,
            day_of_month: Optional[int] = None,
            month_of_year: Optional[int] = None,
            end_date: Optional[date] = None,
            lead_time_days: int = 7,
            interval_mileage: Optional[float] = None,
            interval_hours: Optional[float] = None,
            threshold_alert_percent: int = 90,
            next_due_date: Optional[date] = None,
            last_triggered_at: Optional[datetime] = None,
            last_triggered_mileage: Optional[float] = None,
            last_triggered_hours: Optional[float] = None,
            is_active: bool = True,
    ):
        self.schedule_id = schedule_id
        self.organisation_id = organisation_id
        self.asset_id = asset_id
        self.name = name or schedule_id
        self.interval_type = interval_type
        self.interval_value = interval_value
        self.day_of_week = day_of_week
        self.day_of_month = day_of_month
        self.month_of_year = month_of_year
        self.start_date = start_date
        self.end_date = end_date
        self.lead_time_days = lead_time_days if lead_time_days is not None else 7
        self.interval_mileage = interval_mileage
        self.interval_hours = interval_hours
        self.threshold_alert_percent = threshold_alert_percent or 90
        self.next_due_date = next_due_date
        self.last_triggered_at = last_triggered_at
        self.last_triggered_mileage = last_triggered_mileage
        self.last_triggered_hours = last_triggered_hours
        self.is_active = True if is_active is None else bool(is_active)

    @classmethod
    def create(cls, *args, **kwargs) -> "MaintenanceSchedule":
        """
        Build a validated schedule whose next_due_date is the first
        occurrence after start_date.
        """
        schedule = cls(*args, **kwargs)
        schedule.validate()
        if schedule.next_due_date is None:
            schedule.next_due_date = schedule.next_after(schedule.start_date)
        return schedule

    @property
    def has_usage_triggers(self) -> bool:
        return self.interval_mileage is not None or self.interval_hours is not None

    def next_after(self, from_date: date) -> date:
        """Next calendar due date after from_date under this schedule's rule."""
        return calculate_next_due_date(
            self.interval_type,
            self.interval_value,
            from_date,
            self.day_of_week,
            self.day_of_month,
            self.month_of_year,
        )

    def validate(self) -> None:
        """Raise ConfigurationError if the recurrence or triggers are malformed."""
        self.interval_type = IntervalType.parse(self.interval_type)

        if isinstance(self.interval_value, bool) or not isinstance(self.interval_value, int):
            raise ConfigurationError(
                f"{self.schedule_id}: intervalValue must be an integer, "
                f"got {self.interval_value!r}"
            )
        if self.interval_value < 1:
            raise ConfigurationError(
                f"{self.schedule_id}: intervalValue must be positive, "
                f"got {self.interval_value}"
            )
        _check_range(self.schedule_id, "dayOfWeek", self.day_of_week, 0, 6)
        _check_range(self.schedule_id, "dayOfMonth", self.day_of_month, 1, 31)
        _check_range(self.schedule_id, "monthOfYear", self.month_of_year, 1, 12)

        if not isinstance(self.start_date, date):
            raise ConfigurationError(f"{self.schedule_id}: startDate is required")
        if self.end_date is not None and not isinstance(self.end_date, date):
            raise ConfigurationError(
                f"{self.schedule_id}: endDate must be a date, got {self.end_date!r}"
            )
        if self.end_date is not None and self.end_date < self.start_date:
            raise ConfigurationError(
                f"{self.schedule_id}: endDate {self.end_date} is before "
                f"startDate {self.start_date}"
            )
        if (
            isinstance(self.lead_time_days, bool)
            or not isinstance(self.lead_time_days, int)
            or self.lead_time_days < 0
        ):
            raise ConfigurationError(
                f"{self.schedule_id}: leadTimeDays must be an integer >= 0, "
                f"got {self.lead_time_days!r}"
            )
        for field, value in (
            ("intervalMileage", self.interval_mileage),
            ("intervalHours", self.interval_hours),
        ):
            _check_number(self.schedule_id, field, value)
            if value is not None and value <= 0:
                raise ConfigurationError(
                    f"{self.schedule_id}: {field} must be positive, got {value}"
                )
        _check_number(self.schedule_id, "lastTriggeredMileage", self.last_triggered_mileage)
        _check_number(self.schedule_id, "lastTriggeredHours", self.last_triggered_hours)

    def __repr__(self) -> str:
        return (
            f"MaintenanceSchedule({self.schedule_id!r}, "
            f"next_due_date={self.next_due_date!r}, is_active={self.is_active})"
        )


def _check_range(schedule_id: str, field: str, value, low: int, high: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ConfigurationError(
            f"{schedule_id}: {field} must be an integer {low}-{high}, got {value!r}"
        )


def _check_number(schedule_id: str, field: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{schedule_id}: {field} must be a number, got {value!r}")
