from __future__ import annotations

from dataclasses import dataclass, field

WEEKDAY_KEYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

DEFAULT_SLOT_INTERVAL_MINUTES = 30
DEFAULT_BOOKING_MIN_LEAD_MINUTES = 60
DEFAULT_BOOKING_MAX_DAYS = 30


@dataclass(frozen=True)
class BusinessDay:
    enabled: bool = False
    start: str = "09:00"  # HH:mm, provider wall clock
    end: str = "18:00"


@dataclass(frozen=True)
class GlobalSettings:
    timezone: str
    business_hours: dict[str, BusinessDay] = field(default_factory=dict)
    slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES
    booking_min_lead_minutes: int = DEFAULT_BOOKING_MIN_LEAD_MINUTES
    booking_max_days: int = DEFAULT_BOOKING_MAX_DAYS
    payments_enabled: bool = False
    admin_phone: str | None = None
    admin_email: str | None = None
