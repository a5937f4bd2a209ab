"""IntervalType enum for calendar recurrence rules."""

from enum import Enum
from typing import Union

from .errors import ConfigurationError


class IntervalType(Enum):
    """How a schedule's calendar recurrence advances."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"
    CUSTOM = "custom"  # intervalValue is a day count

    @classmethod
    def parse(cls, value: Union["IntervalType", str]) -> "IntervalType":
        """Accept an IntervalType or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(f"Unknown interval type: {value!r}") from None
