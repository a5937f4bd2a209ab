"""
YAML-backed schedule store, asset readings and work-order log.

A schedule file has three sections, all with camelCase keys:

- schedules:  schedule configuration plus a ``state`` block holding
              nextDueDate and the lastTriggered* fields
- assets:     current readings (id, currentMileage,
              currentOperationalHours, asOf)
- workOrders: work orders appended by the generator
"""

import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .asset_reading import AssetReading
from .errors import ConfigurationError
from .logger import get_logger
from .schedule import MaintenanceSchedule
from .settings import settings
from .triggers import TriggerReason

log = get_logger(__name__)

# One writer at a time per process; every save re-reads the file first.
_write_lock = threading.RLock()


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ConfigurationError(f"Invalid date: {value!r}") from None


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ConfigurationError(f"Invalid timestamp: {value!r}") from None


def parse_schedule(dct: Dict[str, Any]) -> MaintenanceSchedule:
    """Build a schedule from its YAML dict. Does not validate."""
    state = dct.get("state") or {}
    schedule = MaintenanceSchedule(
        schedule_id=str(dct["id"]),
        organisation_id=str(dct.get("organisationId", "")),
        asset_id=str(dct.get("assetId", "")),
        interval_type=dct.get("intervalType"),
        start_date=_to_date(dct.get("startDate")),
        interval_value=dct.get("intervalValue", 1),
        name=dct.get("name"),
        day_of_week=dct.get("dayOfWeek"),
        day_of_month=dct.get("dayOfMonth"),
        month_of_year=dct.get("monthOfYear"),
        end_date=_to_date(dct.get("endDate")),
        lead_time_days=dct.get("leadTimeDays", settings.DEFAULT_LEAD_DAYS),
        interval_mileage=dct.get("intervalMileage"),
        interval_hours=dct.get("intervalHours"),
        threshold_alert_percent=dct.get("thresholdAlertPercent", 90),
        next_due_date=_to_date(state.get("nextDueDate")),
        last_triggered_at=_to_datetime(state.get("lastTriggeredAt")),
        last_triggered_mileage=state.get("lastTriggeredMileage"),
        last_triggered_hours=state.get("lastTriggeredHours"),
        is_active=dct.get("isActive", True),
    )
    # A schedule without state is new: its first due date follows startDate
    if schedule.next_due_date is None:
        try:
            schedule.validate()
            schedule.next_due_date = schedule.next_after(schedule.start_date)
        except ConfigurationError:
            pass  # left for the runner to report
    return schedule


def _parse_reading(dct: Dict[str, Any]) -> AssetReading:
    return AssetReading(
        asset_id=str(dct["id"]),
        current_mileage=dct.get("currentMileage"),
        current_operational_hours=dct.get("currentOperationalHours"),
        as_of=_to_datetime(dct.get("asOf")),
    )


class ScheduleFile:
    """Parsed contents of a schedule YAML file."""

    def __init__(
        self,
        schedules: List[MaintenanceSchedule],
        readings: Dict[str, AssetReading],
        work_orders: Optional[List[Dict[str, Any]]] = None,
    ):
        self.schedules = schedules
        self.readings = readings
        self.work_orders = work_orders or []

    def get_schedule(self, schedule_id: str) -> Optional[MaintenanceSchedule]:
        for schedule in self.schedules:
            if schedule.schedule_id == schedule_id:
                return schedule
        return None


def _read_yaml(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader) or {}


def _write_yaml(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def load_schedule_file(filename: Union[str, Path]) -> ScheduleFile:
    """Load schedules, asset readings and work orders from a YAML file."""
    data = _read_yaml(filename)
    schedules = []
    for d in data.get("schedules") or []:
        try:
            schedules.append(parse_schedule(d))
        except (ConfigurationError, KeyError) as exc:
            log.error("Skipping unreadable schedule entry %s: %s", d.get("id"), exc)
    readings = {}
    for d in data.get("assets") or []:
        reading = _parse_reading(d)
        readings[reading.asset_id] = reading
    return ScheduleFile(schedules, readings, data.get("workOrders"))


def _state_dict(schedule: MaintenanceSchedule) -> Dict[str, Any]:
    """Serialize the mutable schedule fields, omitting None values."""
    state: Dict[str, Any] = {}
    if schedule.next_due_date is not None:
        state["nextDueDate"] = schedule.next_due_date.isoformat()
    if schedule.last_triggered_at is not None:
        state["lastTriggeredAt"] = schedule.last_triggered_at.isoformat()
    if schedule.last_triggered_mileage is not None:
        state["lastTriggeredMileage"] = schedule.last_triggered_mileage
    if schedule.last_triggered_hours is not None:
        state["lastTriggeredHours"] = schedule.last_triggered_hours
    return state


class YamlScheduleStore:
    """Schedule store reading and writing a schedule YAML file."""

    def __init__(self, filename: Union[str, Path]):
        self.filename = filename

    def all_schedules(self) -> List[MaintenanceSchedule]:
        return load_schedule_file(self.filename).schedules

    def get(self, schedule_id: str) -> Optional[MaintenanceSchedule]:
        return load_schedule_file(self.filename).get_schedule(schedule_id)

    def active_schedules(self, organisation_id=None):
        return [
            s for s in self.all_schedules()
            if s.is_active
            and (organisation_id is None or s.organisation_id == organisation_id)
        ]

    def save_state(self, schedule):
        """Write the schedule's state block back into the file."""
        with _write_lock:
            data = _read_yaml(self.filename)
            for entry in data.get("schedules") or []:
                if str(entry.get("id")) == schedule.schedule_id:
                    entry["state"] = _state_dict(schedule)
                    break
            else:
                raise KeyError(f"Schedule {schedule.schedule_id} not found in {self.filename}")
            _write_yaml(self.filename, data)


class YamlAssetReadings:
    """Asset reading source backed by the file's assets section."""

    def __init__(self, filename: Union[str, Path]):
        self.filename = filename

    def all_readings(self) -> Dict[str, AssetReading]:
        return load_schedule_file(self.filename).readings

    def get_reading(self, asset_id):
        return self.all_readings().get(asset_id)


def save_asset_reading(
    filename: Union[str, Path],
    asset_id: str,
    mileage: Optional[float] = None,
    hours: Optional[float] = None,
    as_of: Optional[date] = None,
) -> None:
    """
    Update (or add) an asset's current readings.

    Only the values provided are changed; asOf defaults to today.
    """
    with _write_lock:
        data = _read_yaml(filename)
        if data.get("assets") is None:
            data["assets"] = []

        for entry in data["assets"]:
            if str(entry.get("id")) == asset_id:
                break
        else:
            entry = {"id": asset_id}
            data["assets"].append(entry)

        if mileage is not None:
            entry["currentMileage"] = mileage
        if hours is not None:
            entry["currentOperationalHours"] = hours
        entry["asOf"] = (as_of or date.today()).isoformat()

        _write_yaml(filename, data)


class YamlWorkOrderLog:
    """Work-order generator that appends entries to the file's workOrders section."""

    def __init__(self, filename: Union[str, Path], clock=None):
        self.filename = filename
        self.clock = clock or datetime.now

    def create_from_schedule(self, schedule: MaintenanceSchedule, reason: TriggerReason) -> str:
        with _write_lock:
            data = _read_yaml(self.filename)
            if data.get("workOrders") is None:
                data["workOrders"] = []

            number = f"WO-{len(data['workOrders']) + 1:04d}"
            entry: Dict[str, Any] = {
                "id": number,
                "scheduleId": schedule.schedule_id,
                "assetId": schedule.asset_id,
                "title": schedule.name,
                "cycleKey": ", ".join(reason.cycle_keys),
                "trigger": str(reason),
                "createdAt": self.clock().isoformat(),
            }
            if schedule.next_due_date is not None:
                entry["dueDate"] = schedule.next_due_date.isoformat()
            data["workOrders"].append(entry)

            _write_yaml(self.filename, data)
        log.debug("Appended %s to %s", number, self.filename)
        return number
