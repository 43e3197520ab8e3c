from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class LocationPing:
    ping_id: str
    user_id: str
    latitude: Decimal
    longitude: Decimal
    recorded_at: Optional[datetime] = None
