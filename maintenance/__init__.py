"""
Maintenance schedule engine.

This package computes when recurring maintenance falls due and fires each
due cycle exactly once:
- IntervalType / MaintenanceSchedule: recurrence configuration and state
- calculate_next_due_date / preview_schedule_occurrences: calendar arithmetic
- evaluate: time, mileage and hours trigger conditions
- CycleLedger: idempotency guard on (schedule, cycle)
- ScheduleRunner: evaluation pass over all active schedules
- loader: YAML schedule store, readings and work-order log
"""

from .errors import ConfigurationError, GenerationError, MaintenanceError
from .interval_type import IntervalType
from .occurrence import Occurrence
from .asset_reading import AssetReading
from .cycle_record import CycleRecord
from .recurrence import calculate_next_due_date, preview_schedule_occurrences
from .schedule import MaintenanceSchedule
from .triggers import TriggerKind, TriggerCycle, TriggerReason, TriggerResult, evaluate
from .thresholds import UsageStatus, ThresholdAlert, usage_status, approaching_thresholds
from .ledger import CycleLedger, InMemoryCycleLedger, SqliteCycleLedger, RecordOutcome
from .collaborators import LoggingNotifier
from .runner import ScheduleRunner, PassSummary, ScheduleOutcome, OutcomeState
from .loader import (
    load_schedule_file,
    save_asset_reading,
    YamlScheduleStore,
    YamlAssetReadings,
    YamlWorkOrderLog,
)

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "MaintenanceError",
    "IntervalType",
    "Occurrence",
    "AssetReading",
    "CycleRecord",
    "calculate_next_due_date",
    "preview_schedule_occurrences",
    "MaintenanceSchedule",
    "TriggerKind",
    "TriggerCycle",
    "TriggerReason",
    "TriggerResult",
    "evaluate",
    "UsageStatus",
    "ThresholdAlert",
    "usage_status",
    "approaching_thresholds",
    "CycleLedger",
    "InMemoryCycleLedger",
    "SqliteCycleLedger",
    "RecordOutcome",
    "LoggingNotifier",
    "ScheduleRunner",
    "PassSummary",
    "ScheduleOutcome",
    "OutcomeState",
    "load_schedule_file",
    "save_asset_reading",
    "YamlScheduleStore",
    "YamlAssetReadings",
    "YamlWorkOrderLog",
]
