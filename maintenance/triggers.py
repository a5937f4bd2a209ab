"""
Trigger evaluation for maintenance schedules.

Each configured condition (calendar lead time, odometer, hour meter) is
evaluated on its own and the results are OR-ed together. A condition
reports the cycles it has reached; every cycle carries the key the
idempotency ledger uses to recognise it:

- time:    ``time:<next due date>``
- mileage: ``mileage:<threshold crossed>``
- hours:   ``hours:<threshold crossed>``

An odometer jump that crosses two mileage thresholds at once yields two
cycles, in ascending order.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union

from .asset_reading import AssetReading
from .schedule import MaintenanceSchedule


class TriggerKind(Enum):
    """Which condition produced a cycle. Declaration order is firing order."""

    TIME = "time"
    MILEAGE = "mileage"
    HOURS = "hours"


def format_boundary(value: Union[date, float]) -> str:
    """Render a cycle boundary for keys and messages (15000.0 -> '15000')."""
    if isinstance(value, date):
        return value.isoformat()
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def make_cycle_key(kind: TriggerKind, boundary: Union[date, float]) -> str:
    return f"{kind.value}:{format_boundary(boundary)}"


@dataclass(frozen=True)
class TriggerCycle:
    """One due cycle reached by one condition."""

    kind: TriggerKind
    boundary: Union[date, float]
    observed: Union[date, float]

    @property
    def cycle_key(self) -> str:
        return make_cycle_key(self.kind, self.boundary)

    @property
    def description(self) -> str:
        if self.kind == TriggerKind.TIME:
            return f"Time-based: due {format_boundary(self.boundary)}"
        label = "Mileage" if self.kind == TriggerKind.MILEAGE else "Hours"
        return (
            f"{label}: {format_boundary(self.observed)} >= "
            f"{format_boundary(self.boundary)}"
        )


@dataclass(frozen=True)
class TriggerReason:
    """The cycles that fired on one evaluation."""

    cycles: Tuple[TriggerCycle, ...] = ()

    @property
    def kinds(self) -> Tuple[TriggerKind, ...]:
        return tuple(dict.fromkeys(c.kind for c in self.cycles))

    @property
    def cycle_keys(self) -> Tuple[str, ...]:
        return tuple(c.cycle_key for c in self.cycles)

    def __str__(self) -> str:
        if not self.cycles:
            return "Not yet due"
        return " + ".join(c.description for c in self.cycles)


@dataclass(frozen=True)
class TriggerResult:
    """Outcome of evaluating one schedule against one reading."""

    fires: bool
    reason: TriggerReason
    degraded: bool = False  # usage telemetry missing, time-only evaluation


class TriggerCondition:
    """A single firing condition of a schedule."""

    kind: TriggerKind

    def has_telemetry(self, reading: Optional[AssetReading]) -> bool:
        return True

    def due_cycles(
        self,
        schedule: MaintenanceSchedule,
        reading: Optional[AssetReading],
        today: date,
    ) -> List[TriggerCycle]:
        raise NotImplementedError


class TimeCondition(TriggerCondition):
    """Due from next_due_date - lead_time_days, unless past end_date."""

    kind = TriggerKind.TIME

    def due_cycles(self, schedule, reading, today):
        due = schedule.next_due_date
        if due is None:
            return []
        if schedule.end_date is not None and due > schedule.end_date:
            return []
        if today >= due - timedelta(days=schedule.lead_time_days):
            return [TriggerCycle(self.kind, due, today)]
        return []


class UsageCondition(TriggerCondition):
    """Due each time a counter reaches last_triggered + interval."""

    interval_attr = ""
    last_attr = ""
    reading_attr = ""

    def interval(self, schedule: MaintenanceSchedule) -> Optional[float]:
        return getattr(schedule, self.interval_attr)

    def last_triggered(self, schedule: MaintenanceSchedule) -> float:
        return getattr(schedule, self.last_attr) or 0

    def current(self, reading: Optional[AssetReading]) -> Optional[float]:
        if reading is None:
            return None
        return getattr(reading, self.reading_attr)

    def has_telemetry(self, reading):
        value = self.current(reading)
        # an unusable counter counts as missing
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    def due_cycles(self, schedule, reading, today):
        if schedule.end_date is not None and today > schedule.end_date:
            return []
        interval = self.interval(schedule)
        if not interval or not self.has_telemetry(reading):
            return []
        current = self.current(reading)

        last = self.last_triggered(schedule)
        cycles = []
        step = 1
        boundary = last + interval
        while current >= boundary:
            cycles.append(TriggerCycle(self.kind, boundary, current))
            step += 1
            boundary = last + step * interval
        return cycles


class MileageCondition(UsageCondition):
    kind = TriggerKind.MILEAGE
    interval_attr = "interval_mileage"
    last_attr = "last_triggered_mileage"
    reading_attr = "current_mileage"


class HoursCondition(UsageCondition):
    kind = TriggerKind.HOURS
    interval_attr = "interval_hours"
    last_attr = "last_triggered_hours"
    reading_attr = "current_operational_hours"


def conditions_for(schedule: MaintenanceSchedule) -> List[TriggerCondition]:
    """The conditions configured on a schedule, in firing order."""
    conditions: List[TriggerCondition] = [TimeCondition()]
    if schedule.interval_mileage is not None:
        conditions.append(MileageCondition())
    if schedule.interval_hours is not None:
        conditions.append(HoursCondition())
    return conditions


def evaluate(
    schedule: MaintenanceSchedule,
    reading: Optional[AssetReading],
    today: date,
) -> TriggerResult:
    """
    Decide whether any configured condition is satisfied.

    Usage conditions whose counter is missing from the reading are skipped
    and the result is flagged as degraded; the time condition still applies.
    """
    cycles: List[TriggerCycle] = []
    degraded = False
    for condition in conditions_for(schedule):
        if not condition.has_telemetry(reading):
            degraded = True
            continue
        cycles.extend(condition.due_cycles(schedule, reading, today))
    return TriggerResult(
        fires=bool(cycles), reason=TriggerReason(tuple(cycles)), degraded=degraded
    )
