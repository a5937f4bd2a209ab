"""Occurrence dataclass for previewed due dates."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Occurrence:
    """One future cycle of a schedule: when it is due and when it becomes actionable."""

    due_date: date
    lead_date: date
