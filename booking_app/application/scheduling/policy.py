from __future__ import annotations

from datetime import datetime, timedelta

from booking_app.application.exceptions import PolicyRejection
from booking_app.application.scheduling.timezone import add_days, day_key_of, local_instant, resolve_timezone, to_iso
from booking_app.domain.entities.global_settings import GlobalSettings


def horizon_bounds(now: datetime, settings: GlobalSettings) -> tuple[str, str]:
    """(first, last) bookable day keys, both inclusive, in the provider timezone."""
    tz = resolve_timezone(settings.timezone)
    today = day_key_of(now, tz)
    return today, add_days(today, settings.booking_max_days)


def is_within_horizon(day_key: str, now: datetime, settings: GlobalSettings) -> bool:
    first, last = horizon_bounds(now, settings)
    # ISO day keys sort chronologically
    return first <= day_key <= last


def earliest_bookable(now: datetime, settings: GlobalSettings) -> datetime:
    return now + timedelta(minutes=settings.booking_min_lead_minutes)


def filter_by_policy(day_key: str, candidates: list[int], now: datetime, settings: GlobalSettings) -> list[int]:
    """
    Drop candidates outside the booking horizon or closer than the minimum lead time.

    Lead time is compared as full instants, so the result is also right when
    now + lead crosses midnight; days after today are normally untouched.
    """
    if not is_within_horizon(day_key, now, settings):
        return []

    tz = resolve_timezone(settings.timezone)
    earliest = earliest_bookable(now, settings)
    return [c for c in candidates if local_instant(day_key, c, tz) >= earliest]


def check_booking_policy(start: datetime, now: datetime, settings: GlobalSettings) -> None:
    tz = resolve_timezone(settings.timezone)
    day_key = day_key_of(start, tz)
    if not is_within_horizon(day_key, now, settings):
        first, last = horizon_bounds(now, settings)
        raise PolicyRejection(f"Bookings are open from {first} to {last}; {day_key} is outside that range")
    earliest = earliest_bookable(now, settings)
    if start < earliest:
        raise PolicyRejection(
            f"Bookings need at least {settings.booking_min_lead_minutes} minutes notice "
            f"(earliest {to_iso(earliest)})"
        )


def bookable_day_keys(now: datetime, settings: GlobalSettings) -> list[str]:
    first, _ = horizon_bounds(now, settings)
    return [add_days(first, offset) for offset in range(settings.booking_max_days + 1)]
