from __future__ import annotations

from booking_app.application.exceptions import ConfigurationError
from booking_app.application.scheduling.timezone import parse_hhmm, resolve_timezone, weekday_key_for_date
from booking_app.domain.entities.global_settings import WEEKDAY_KEYS, GlobalSettings
from booking_app.domain.entities.slot import DayWindow


def validate_settings(settings: GlobalSettings) -> GlobalSettings:
    """
    Reject a settings document that cannot drive the calendar.
    Called when the operator saves settings; never falls back to a default schedule.
    """
    resolve_timezone(settings.timezone)

    unknown = set(settings.business_hours) - set(WEEKDAY_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown weekday keys in business hours: {sorted(unknown)}")

    for key, day in settings.business_hours.items():
        start = parse_hhmm(day.start)
        end = parse_hhmm(day.end)
        if day.enabled and end <= start:
            raise ConfigurationError(f"Business hours for {key}: end {day.end} must be after start {day.start}")

    if settings.slot_interval_minutes <= 0:
        raise ConfigurationError("slot_interval_minutes must be positive")
    if settings.booking_min_lead_minutes < 0:
        raise ConfigurationError("booking_min_lead_minutes cannot be negative")
    if settings.booking_max_days < 0:
        raise ConfigurationError("booking_max_days cannot be negative")
    return settings


def window_for(day_key: str, settings: GlobalSettings) -> DayWindow | None:
    """Opening window for a provider-local date, or None when closed."""
    weekday = weekday_key_for_date(day_key)
    day = settings.business_hours.get(weekday)
    if day is None or not day.enabled:
        return None

    start = parse_hhmm(day.start)
    end = parse_hhmm(day.end)
    if end <= start:
        raise ConfigurationError(f"Business hours for {weekday}: end {day.end} must be after start {day.start}")
    return DayWindow(day_key=day_key, start_minute=start, end_minute=end)
