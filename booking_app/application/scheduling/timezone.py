"""
Conversions between UTC instants and the provider's wall clock.

Every function takes the provider timezone explicitly; nothing here looks at
the host's local zone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_app.application.exceptions import ConfigurationError
from booking_app.domain.entities.global_settings import WEEKDAY_KEYS

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def resolve_timezone(name: str) -> ZoneInfo:
    if not name or not name.strip():
        raise ConfigurationError("Timezone is required")
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Invalid timezone: {name}") from e


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_local(instant: datetime, tz: ZoneInfo) -> datetime:
    return _as_utc(instant).astimezone(tz)


def day_key_of(instant: datetime, tz: ZoneInfo) -> str:
    return to_local(instant, tz).strftime("%Y-%m-%d")


def weekday_key_of(instant: datetime, tz: ZoneInfo) -> str:
    return weekday_key_for_date(to_local(instant, tz).date())


def weekday_key_for_date(value: date | str) -> str:
    if isinstance(value, str):
        value = parse_day_key(value)
    # date.weekday(): Monday == 0
    return WEEKDAY_KEYS[(value.weekday() + 1) % 7]


def local_wall_clock(instant: datetime, tz: ZoneInfo) -> tuple[int, int]:
    local = to_local(instant, tz)
    return local.hour, local.minute


def minute_of_day(instant: datetime, tz: ZoneInfo) -> int:
    hour, minute = local_wall_clock(instant, tz)
    return hour * 60 + minute


def parse_day_key(day_key: str) -> date:
    try:
        return date.fromisoformat(day_key)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid day key: {day_key!r}") from e


def add_days(day_key: str, days: int) -> str:
    return (parse_day_key(day_key) + timedelta(days=days)).isoformat()


def local_instant(day_key: str, minute: int, tz: ZoneInfo) -> datetime:
    """UTC instant of `minute` minutes after local midnight on `day_key`.

    Wall-clock times that fall into a DST gap resolve with the offset in
    force before the transition (zoneinfo fold=0).
    """
    day = parse_day_key(day_key)
    hours, minutes = divmod(minute, 60)
    local = datetime(day.year, day.month, day.day, tzinfo=tz) + timedelta(hours=hours, minutes=minutes)
    # Adding a timedelta to an aware datetime is wall-clock arithmetic.
    return local.astimezone(timezone.utc)


def parse_hhmm(value: str) -> int:
    match = _HHMM_RE.match((value or "").strip())
    if not match:
        raise ConfigurationError(f"Invalid time of day: {value!r} (expected HH:mm)")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minute: int) -> str:
    hours, minutes = divmod(minute, 60)
    return f"{hours:02d}:{minutes:02d}"


def parse_instant(value: str | datetime | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def to_iso(instant: datetime | None) -> str | None:
    if instant is None:
        return None
    return _as_utc(instant).isoformat().replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
