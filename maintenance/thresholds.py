"""Progress towards usage-based thresholds (mileage and operating hours)."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .asset_reading import AssetReading
from .schedule import MaintenanceSchedule

URGENCY_ORDER = {"overdue": 3, "due": 2, "approaching": 1}


@dataclass
class UsageStatus:
    """How far a counter has progressed through its current interval."""

    current: float
    last_triggered: float
    interval: float
    next_trigger: float
    remaining: float
    progress: int  # percent of the interval used, rounded


@dataclass
class ThresholdAlert:
    """A usage schedule whose progress has reached its alert percentage."""

    schedule: MaintenanceSchedule
    urgency: str
    mileage: Optional[UsageStatus] = None
    hours: Optional[UsageStatus] = None

    @property
    def max_progress(self) -> int:
        return max(
            self.mileage.progress if self.mileage else 0,
            self.hours.progress if self.hours else 0,
        )


def usage_status(
    current: float, last_triggered: Optional[float], interval: float
) -> UsageStatus:
    """
    Calculate usage progress.

    - next_trigger: last_triggered + interval (no history counts as 0)
    - progress: percent of interval used since last trigger
    """
    last = last_triggered or 0
    next_trigger = last + interval
    return UsageStatus(
        current=current,
        last_triggered=last,
        interval=interval,
        next_trigger=next_trigger,
        remaining=next_trigger - current,
        progress=int(round((current - last) / interval * 100)),
    )


def urgency_for(progress: int) -> str:
    if progress >= 100:
        return "overdue"
    if progress >= 95:
        return "due"
    return "approaching"


def schedule_usage(
    schedule: MaintenanceSchedule, reading: Optional[AssetReading]
) -> Dict[str, Optional[UsageStatus]]:
    """Mileage and hours status for a schedule (None where not configured or unread)."""
    mileage = hours = None
    if reading is not None:
        if schedule.interval_mileage and reading.current_mileage is not None:
            mileage = usage_status(
                reading.current_mileage,
                schedule.last_triggered_mileage,
                schedule.interval_mileage,
            )
        if schedule.interval_hours and reading.current_operational_hours is not None:
            hours = usage_status(
                reading.current_operational_hours,
                schedule.last_triggered_hours,
                schedule.interval_hours,
            )
    return {"mileage": mileage, "hours": hours}


def approaching_thresholds(
    schedules: List[MaintenanceSchedule],
    readings: Dict[str, AssetReading],
) -> List[ThresholdAlert]:
    """
    Find active usage schedules at or past their alert percentage.

    Sorted by urgency (overdue, due, approaching), then progress descending.
    """
    alerts = []
    for schedule in schedules:
        if not schedule.is_active or not schedule.has_usage_triggers:
            continue
        usage = schedule_usage(schedule, readings.get(schedule.asset_id))
        threshold = schedule.threshold_alert_percent

        mileage = usage["mileage"]
        hours = usage["hours"]
        if mileage is not None and mileage.progress < threshold:
            mileage = None
        if hours is not None and hours.progress < threshold:
            hours = None
        if mileage is None and hours is None:
            continue

        alert = ThresholdAlert(schedule=schedule, urgency="", mileage=mileage, hours=hours)
        alert.urgency = urgency_for(alert.max_progress)
        alerts.append(alert)

    alerts.sort(key=lambda a: (-URGENCY_ORDER[a.urgency], -a.max_progress))
    return alerts
