"""Contracts for the services the schedule runner depends on."""

from typing import List, Optional, Protocol

from .asset_reading import AssetReading
from .logger import get_logger
from .schedule import MaintenanceSchedule
from .triggers import TriggerReason

log = get_logger(__name__)


class ScheduleStore(Protocol):
    def active_schedules(
        self, organisation_id: Optional[str] = None
    ) -> List[MaintenanceSchedule]:
        """All active schedules, optionally for one organisation."""

    def save_state(self, schedule: MaintenanceSchedule) -> None:
        """Persist next_due_date and the last_triggered_* fields."""


class AssetReadingSource(Protocol):
    def get_reading(self, asset_id: str) -> Optional[AssetReading]:
        """Current mileage/hours for an asset, or None if unknown."""


class WorkOrderGenerator(Protocol):
    def create_from_schedule(
        self, schedule: MaintenanceSchedule, reason: TriggerReason
    ) -> str:
        """Create a work order for one cycle and return its identifier."""


class Notifier(Protocol):
    def notify(
        self, schedule: MaintenanceSchedule, reason: TriggerReason, action_id: str
    ) -> None:
        """Best-effort notice that a work order was generated."""


class LoggingNotifier:
    """Notifier that only writes a log line."""

    def notify(self, schedule, reason, action_id):
        log.info(
            "Scheduled maintenance '%s' on asset %s: work order %s (%s)",
            schedule.name,
            schedule.asset_id,
            action_id,
            reason,
        )
