"""CycleRecord dataclass for the idempotency ledger."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CycleRecord:
    """A due cycle that has already produced a generation action."""

    schedule_id: str
    cycle_key: str
    generated_action_id: str
    created_at: datetime
