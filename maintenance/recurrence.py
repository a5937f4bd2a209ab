"""
Calendar recurrence arithmetic for maintenance schedules.

Pure functions only: no I/O and no state. All arithmetic is on calendar
days; month and year steps clamp to the last valid day of the target month
instead of overflowing into the next one (Jan 31 + 1 month = Feb 28/29).
"""

from datetime import date, timedelta
from typing import Any, List, Mapping, Optional, Union

from dateutil.relativedelta import relativedelta

from .interval_type import IntervalType
from .occurrence import Occurrence

DEFAULT_PREVIEW_COUNT = 10


def calculate_next_due_date(
    interval_type: Union[IntervalType, str],
    interval_value: int,
    from_date: date,
    day_of_week: Optional[int] = None,
    day_of_month: Optional[int] = None,
    month_of_year: Optional[int] = None,
) -> date:
    """
    Calculate the due date that follows from_date.

    - daily/custom: from_date + interval_value days
    - weekly: from_date + 7 * interval_value days, then moved to day_of_week
      (0=Sunday..6=Saturday) inside the Sunday-starting week of that date
    - monthly/quarterly: + interval_value (x3) months, day set to
      day_of_month when given, clamped to the target month's length
    - annually: + interval_value years, month set to month_of_year and day
      to day_of_month when given, clamped the same way
    """
    kind = IntervalType.parse(interval_type)

    if kind in (IntervalType.DAILY, IntervalType.CUSTOM):
        return from_date + timedelta(days=interval_value)

    if kind == IntervalType.WEEKLY:
        base = from_date + timedelta(weeks=interval_value)
        if day_of_week is None:
            return base
        # date.weekday() is Monday=0; shift so Sunday=0
        week_start = base - timedelta(days=(base.weekday() + 1) % 7)
        return week_start + timedelta(days=day_of_week)

    if kind in (IntervalType.MONTHLY, IntervalType.QUARTERLY):
        months = interval_value * (3 if kind == IntervalType.QUARTERLY else 1)
        # relativedelta clamps an absolute day to the target month's length
        return from_date + relativedelta(months=months, day=day_of_month)

    # ANNUALLY
    return from_date + relativedelta(
        years=interval_value, month=month_of_year, day=day_of_month
    )


def _config_value(config: Any, name: str, default: Any = None) -> Any:
    if isinstance(config, Mapping):
        return config.get(name, default)
    return getattr(config, name, default)


def preview_schedule_occurrences(
    config: Any, count: int = DEFAULT_PREVIEW_COUNT
) -> List[Occurrence]:
    """
    List up to count upcoming occurrences, starting from config.start_date.

    config is a MaintenanceSchedule or a mapping with the same attribute
    names. Generation stops at the first due date after end_date (end_date
    itself is included); it never skips forward past it.
    """
    interval_type = _config_value(config, "interval_type")
    interval_value = _config_value(config, "interval_value", 1)
    end_date = _config_value(config, "end_date")
    lead_time_days = _config_value(config, "lead_time_days", 0) or 0
    day_of_week = _config_value(config, "day_of_week")
    day_of_month = _config_value(config, "day_of_month")
    month_of_year = _config_value(config, "month_of_year")

    occurrences: List[Occurrence] = []
    current = _config_value(config, "start_date")
    for _ in range(max(count, 0)):
        due_date = calculate_next_due_date(
            interval_type,
            interval_value,
            current,
            day_of_week,
            day_of_month,
            month_of_year,
        )
        if end_date is not None and due_date > end_date:
            break
        occurrences.append(
            Occurrence(
                due_date=due_date,
                lead_date=due_date - timedelta(days=lead_time_days),
            )
        )
        current = due_date
    return occurrences
