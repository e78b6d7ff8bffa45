from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DayWindow:
    day_key: str
    start_minute: int  # minutes since local midnight
    end_minute: int


@dataclass(frozen=True)
class CandidateSlot:
    start: datetime  # UTC
    end: datetime
    label: str  # HH:mm, provider wall clock
