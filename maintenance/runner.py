"""
Evaluation pass over maintenance schedules.

For every active schedule the runner evaluates the trigger conditions,
checks each fired cycle against the ledger, and for new cycles calls the
work-order generator, records the cycle and advances the schedule:

    idle -> evaluating -> not due                 -> idle
                       -> due, already recorded   -> idle
                       -> due, new cycle -> firing -> advanced -> idle

A failing schedule never aborts the pass. If generation fails the schedule
is left as it was and the same cycle is retried on the next pass.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from .collaborators import AssetReadingSource, Notifier, ScheduleStore, WorkOrderGenerator
from .errors import ConfigurationError, GenerationError
from .ledger import CycleLedger, RecordOutcome
from .logger import get_logger
from .schedule import MaintenanceSchedule
from .triggers import TriggerCycle, TriggerKind, TriggerReason, evaluate

log = get_logger(__name__)


class OutcomeState(Enum):
    NOT_DUE = "not_due"
    INACTIVE = "inactive"
    FIRED = "fired"
    DUPLICATE = "duplicate"
    INVALID = "invalid"  # configuration error, schedule skipped
    ERROR = "error"  # collaborator failure, retried next pass


@dataclass
class ScheduleOutcome:
    """What happened to one schedule during a pass."""

    schedule_id: str
    state: OutcomeState = OutcomeState.NOT_DUE
    action_ids: List[str] = field(default_factory=list)
    duplicate_keys: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    degraded: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "scheduleId": self.schedule_id,
            "status": self.state.value,
            "actionIds": list(self.action_ids),
            "duplicateCycles": list(self.duplicate_keys),
            "messages": list(self.messages),
            "degraded": self.degraded,
            "error": self.error,
        }


@dataclass
class PassSummary:
    """Counts for one evaluation pass, reported to the operator."""

    checked: int = 0
    fired: int = 0
    skipped_not_due: int = 0
    skipped_duplicate: int = 0
    errors: int = 0
    errored_schedule_ids: List[str] = field(default_factory=list)
    degraded_schedule_ids: List[str] = field(default_factory=list)
    outcomes: List[ScheduleOutcome] = field(default_factory=list)

    def add(self, outcome: ScheduleOutcome) -> None:
        self.outcomes.append(outcome)
        self.checked += 1
        self.fired += len(outcome.action_ids)
        self.skipped_duplicate += len(outcome.duplicate_keys)
        if outcome.state in (OutcomeState.NOT_DUE, OutcomeState.INACTIVE):
            self.skipped_not_due += 1
        if outcome.state in (OutcomeState.ERROR, OutcomeState.INVALID):
            self.errors += 1
            self.errored_schedule_ids.append(outcome.schedule_id)
        if outcome.degraded:
            self.degraded_schedule_ids.append(outcome.schedule_id)

    def to_dict(self) -> dict:
        return {
            "checked": self.checked,
            "fired": self.fired,
            "skippedNotDue": self.skipped_not_due,
            "skippedDuplicate": self.skipped_duplicate,
            "errors": self.errors,
            "erroredScheduleIds": list(self.errored_schedule_ids),
            "degradedScheduleIds": list(self.degraded_schedule_ids),
        }


class ScheduleRunner:
    """Runs evaluation passes against injected collaborators."""

    def __init__(
        self,
        store: ScheduleStore,
        readings: AssetReadingSource,
        generator: WorkOrderGenerator,
        ledger: CycleLedger,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.readings = readings
        self.generator = generator
        self.ledger = ledger
        self.notifier = notifier
        self.clock = clock or datetime.now

    def run_evaluation_pass(
        self,
        as_of: Optional[datetime] = None,
        organisation_id: Optional[str] = None,
    ) -> PassSummary:
        """Evaluate every active schedule once."""
        as_of = as_of or self.clock()
        summary = PassSummary()
        for schedule in self.store.active_schedules(organisation_id):
            summary.add(self.evaluate_schedule(schedule, as_of))

        log.info(
            "Evaluation pass as of %s: checked=%d fired=%d not_due=%d "
            "duplicate=%d errors=%d",
            as_of.isoformat(),
            summary.checked,
            summary.fired,
            summary.skipped_not_due,
            summary.skipped_duplicate,
            summary.errors,
        )
        if summary.errored_schedule_ids:
            log.warning("Schedules with errors: %s", ", ".join(summary.errored_schedule_ids))
        return summary

    def evaluate_schedule(
        self, schedule: MaintenanceSchedule, as_of: Optional[datetime] = None
    ) -> ScheduleOutcome:
        """Evaluate and, where due, fire one schedule. Never raises."""
        as_of = as_of or self.clock()
        outcome = ScheduleOutcome(schedule.schedule_id)

        try:
            schedule.validate()
        except ConfigurationError as exc:
            log.warning("Skipping invalid schedule %s: %s", schedule.schedule_id, exc)
            outcome.state = OutcomeState.INVALID
            outcome.error = str(exc)
            return outcome

        if not schedule.is_active:
            outcome.state = OutcomeState.INACTIVE
            return outcome

        try:
            self._evaluate(schedule, as_of, outcome)
        except Exception as exc:
            log.error(
                "Schedule %s failed: %s", schedule.schedule_id, exc,
                exc_info=not isinstance(exc, GenerationError),
            )
            outcome.state = OutcomeState.ERROR
            outcome.error = str(exc)
        return outcome

    def _evaluate(self, schedule, as_of, outcome):
        reading = None
        if schedule.has_usage_triggers:
            try:
                reading = self.readings.get_reading(schedule.asset_id)
            except Exception:
                log.warning(
                    "No reading for asset %s, evaluating schedule %s on time only",
                    schedule.asset_id, schedule.schedule_id, exc_info=True,
                )

        result = evaluate(schedule, reading, as_of.date())
        outcome.degraded = result.degraded
        if result.degraded:
            log.warning(
                "Usage telemetry unavailable for asset %s (schedule %s)",
                schedule.asset_id, schedule.schedule_id,
            )
        if not result.fires:
            log.debug("Schedule %s not due", schedule.schedule_id)
            return

        for cycle in result.reason.cycles:
            self._fire_cycle(schedule, cycle, as_of, outcome)

        if outcome.action_ids:
            outcome.state = OutcomeState.FIRED
        elif outcome.duplicate_keys:
            outcome.state = OutcomeState.DUPLICATE

    def _fire_cycle(
        self,
        schedule: MaintenanceSchedule,
        cycle: TriggerCycle,
        as_of: datetime,
        outcome: ScheduleOutcome,
    ) -> None:
        key = cycle.cycle_key
        reason = TriggerReason((cycle,))

        if self.ledger.has_fired(schedule.schedule_id, key):
            log.info(
                "Cycle %s of schedule %s already generated, skipping",
                key, schedule.schedule_id,
            )
            outcome.duplicate_keys.append(key)
            outcome.messages.append(f"Already generated for {key}")
            # the stored state may still point at this cycle if an earlier
            # write failed; advancing is deterministic so repeating it is safe
            self._advance(schedule, cycle, None)
            self.store.save_state(schedule)
            return

        try:
            action_id = self.generator.create_from_schedule(schedule, reason)
        except Exception as exc:
            raise GenerationError(
                f"Work order generation failed for {key}: {exc}"
            ) from exc
        if not action_id:
            raise GenerationError(f"Work order generation returned no id for {key}")

        if self.ledger.record_fire(schedule.schedule_id, key, action_id) == RecordOutcome.DUPLICATE:
            log.warning(
                "Cycle %s of schedule %s was recorded by a concurrent pass; "
                "work order %s is not recorded",
                key, schedule.schedule_id, action_id,
            )
            outcome.duplicate_keys.append(key)
            outcome.messages.append(f"Recorded concurrently: {key}")
            return

        outcome.action_ids.append(action_id)
        outcome.messages.append(str(reason))
        log.info(
            "Generated %s for schedule %s (%s)", action_id, schedule.schedule_id, reason
        )

        self._advance(schedule, cycle, as_of)
        self.store.save_state(schedule)
        self._notify(schedule, reason, action_id)

    @staticmethod
    def _advance(
        schedule: MaintenanceSchedule,
        cycle: TriggerCycle,
        fired_at: Optional[datetime],
    ) -> None:
        """Move the fields relevant to the cycle's trigger past that cycle."""
        if cycle.kind == TriggerKind.TIME:
            if schedule.next_due_date == cycle.boundary:
                schedule.next_due_date = schedule.next_after(cycle.boundary)
        elif cycle.kind == TriggerKind.MILEAGE:
            schedule.last_triggered_mileage = max(
                schedule.last_triggered_mileage or 0, cycle.boundary
            )
        elif cycle.kind == TriggerKind.HOURS:
            schedule.last_triggered_hours = max(
                schedule.last_triggered_hours or 0, cycle.boundary
            )
        if fired_at is not None:
            schedule.last_triggered_at = fired_at

    def _notify(self, schedule, reason, action_id) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(schedule, reason, action_id)
        except Exception:
            log.warning(
                "Notification failed for schedule %s, work order %s",
                schedule.schedule_id, action_id, exc_info=True,
            )
