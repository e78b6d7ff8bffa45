from __future__ import annotations

from datetime import timedelta
from zoneinfo import ZoneInfo

from booking_app.application.exceptions import ConfigurationError
from booking_app.application.scheduling.timezone import format_hhmm, local_instant, minute_of_day
from booking_app.domain.entities.slot import CandidateSlot, DayWindow


def generate_slots(window: DayWindow, interval_minutes: int, service_duration_minutes: int) -> list[int]:
    """
    Candidate start offsets (minutes since local midnight) inside `window`.

    Starts at window.start and steps by interval_minutes; a candidate is kept
    only if the whole service fits before window.end.
    """
    if interval_minutes <= 0:
        raise ConfigurationError(f"Slot interval must be positive, got {interval_minutes}")
    if service_duration_minutes <= 0:
        raise ConfigurationError(f"Service duration must be positive, got {service_duration_minutes}")

    slots: list[int] = []
    candidate = window.start_minute
    while candidate + service_duration_minutes <= window.end_minute:
        slots.append(candidate)
        candidate += interval_minutes
    return slots


def format_slots(offsets: list[int]) -> list[str]:
    return [format_hhmm(offset) for offset in offsets]


def materialize_slots(
    day_key: str,
    offsets: list[int],
    service_duration_minutes: int,
    tz: ZoneInfo,
) -> list[CandidateSlot]:
    """UTC slots for `offsets` on `day_key`.

    Offsets whose wall-clock time does not exist that day (skipped by a DST
    jump) are dropped.
    """
    slots: list[CandidateSlot] = []
    for offset in offsets:
        start = local_instant(day_key, offset, tz)
        if minute_of_day(start, tz) != offset:
            continue
        slots.append(
            CandidateSlot(
                start=start,
                end=start + timedelta(minutes=service_duration_minutes),
                label=format_hhmm(offset),
            )
        )
    return slots
