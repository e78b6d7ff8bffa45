"""
Conflict detection against already committed appointments.

Only appointments on the same day key and in the blocking set take part.
Intervals are half-open, so back-to-back bookings never collide.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from booking_app.application.exceptions import ConflictError
from booking_app.domain.entities.appointment import Appointment
from booking_app.domain.entities.slot import CandidateSlot

DEFAULT_CONFLICT_DURATION_MINUTES = 60


def effective_interval(
    appointment: Appointment,
    default_duration_minutes: int = DEFAULT_CONFLICT_DURATION_MINUTES,
) -> tuple[datetime, datetime]:
    if appointment.final_start_at and appointment.final_end_at:
        return appointment.final_start_at, appointment.final_end_at
    start = appointment.authoritative_start
    duration = appointment.duration_minutes or default_duration_minutes
    return start, start + timedelta(minutes=duration)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and end_a > start_b


def find_conflicts(
    candidate_start: datetime,
    candidate_end: datetime,
    day_key: str,
    existing: Iterable[Appointment],
    exclude_id: str | None = None,
    default_duration_minutes: int = DEFAULT_CONFLICT_DURATION_MINUTES,
) -> list[Appointment]:
    conflicts: list[Appointment] = []
    for appt in existing:
        if appt.day_key != day_key or not appt.is_blocking:
            continue
        if exclude_id and appt.id == exclude_id:
            continue
        start, end = effective_interval(appt, default_duration_minutes)
        if overlaps(candidate_start, candidate_end, start, end):
            conflicts.append(appt)
    return conflicts


def has_conflict(
    candidate_start: datetime,
    candidate_end: datetime,
    day_key: str,
    existing: Iterable[Appointment],
    exclude_id: str | None = None,
    default_duration_minutes: int = DEFAULT_CONFLICT_DURATION_MINUTES,
) -> bool:
    return bool(
        find_conflicts(candidate_start, candidate_end, day_key, existing, exclude_id, default_duration_minutes)
    )


def available_slots(
    slots: list[CandidateSlot],
    day_key: str,
    existing: Iterable[Appointment],
    default_duration_minutes: int = DEFAULT_CONFLICT_DURATION_MINUTES,
) -> list[CandidateSlot]:
    existing = list(existing)
    return [
        slot
        for slot in slots
        if not has_conflict(slot.start, slot.end, day_key, existing, default_duration_minutes=default_duration_minutes)
    ]


def ensure_no_conflict(
    candidate_start: datetime,
    candidate_end: datetime,
    day_key: str,
    existing: Iterable[Appointment],
    exclude_id: str | None = None,
) -> None:
    conflicts = find_conflicts(candidate_start, candidate_end, day_key, existing, exclude_id)
    if conflicts:
        raise ConflictError(
            "This time is no longer available, please choose another",
            conflicting_ids=[a.id for a in conflicts],
        )
