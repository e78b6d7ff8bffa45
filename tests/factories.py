"""Shared builders for the test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from booking_app.application.scheduling.timezone import local_instant, parse_hhmm, resolve_timezone
from booking_app.application.ports.notifier import NotificationPort
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.domain.entities.global_settings import BusinessDay, GlobalSettings
from booking_app.domain.entities.service import Service

TZ_NAME = "America/Mexico_City"  # UTC-6, no DST
TZ = resolve_timezone(TZ_NAME)
MONDAY = "2026-03-02"
TUESDAY = "2026-03-03"
SUNDAY = "2026-03-01"


class RecordingNotifier(NotificationPort):
    def __init__(self) -> None:
        self.events = []

    def publish(self, event, appointment) -> None:
        self.events.append((event.type, appointment.id))


def make_settings(**overrides) -> GlobalSettings:
    weekday = BusinessDay(enabled=True, start="09:00", end="12:00")
    values = dict(
        timezone=TZ_NAME,
        business_hours={
            "sun": BusinessDay(enabled=False),
            "mon": weekday,
            "tue": weekday,
            "wed": weekday,
            "thu": weekday,
            "fri": weekday,
            "sat": BusinessDay(enabled=True, start="10:00", end="14:00"),
        },
        slot_interval_minutes=30,
        booking_min_lead_minutes=60,
        booking_max_days=30,
        payments_enabled=True,
    )
    values.update(overrides)
    return GlobalSettings(**values)


def make_service(**overrides) -> Service:
    values = dict(id="haircut", name="Haircut", duration_min=60, price=350.0)
    values.update(overrides)
    return Service(**values)


def at(day_key: str, hhmm: str) -> datetime:
    """UTC instant of a provider wall-clock time."""
    return local_instant(day_key, parse_hhmm(hhmm), TZ)


def make_appointment(
    appointment_id: str = "a1",
    start: datetime | None = None,
    day_key: str = MONDAY,
    status: AppointmentStatus = AppointmentStatus.requested,
    duration_minutes: int | None = 60,
    user_id: str = "u1",
    **overrides,
) -> Appointment:
    start = start or at(day_key, "10:00")
    created = datetime(2026, 2, 27, 12, 0, tzinfo=timezone.utc)
    values = dict(
        id=appointment_id,
        user_id=user_id,
        service_id="haircut",
        service_name="Haircut",
        requested_start_at=start,
        day_key=day_key,
        status=status,
        duration_minutes=duration_minutes,
        created_at=created,
        updated_at=created,
    )
    values.update(overrides)
    return Appointment(**values)


def confirmed(appointment_id: str, day_key: str, start: str, end: str) -> Appointment:
    start_at = at(day_key, start)
    end_at = at(day_key, end)
    return make_appointment(
        appointment_id,
        start=start_at,
        day_key=day_key,
        status=AppointmentStatus.confirmed,
        final_start_at=start_at,
        final_end_at=end_at,
        duration_minutes=int((end_at - start_at) / timedelta(minutes=1)),
    )
