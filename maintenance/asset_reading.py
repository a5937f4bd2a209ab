"""AssetReading dataclass for current asset telemetry."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AssetReading:
    """Current odometer and hour-meter values for an asset."""

    asset_id: str
    current_mileage: Optional[float] = None
    current_operational_hours: Optional[float] = None
    as_of: Optional[datetime] = None
