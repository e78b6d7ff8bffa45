"""
Appointment lifecycle.

    requested        -> adjusted | awaiting_payment | confirmed | cancelled
    adjusted         -> confirmed | cancelled
    awaiting_payment -> confirmed | expired | cancelled
    confirmed        -> cancelled

Each transition is a pure function returning a new Appointment plus the
event that drives outbound notifications. Anything not listed raises
IllegalTransitionError and leaves the input untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from booking_app.application.exceptions import IllegalTransitionError
from booking_app.application.scheduling.conflicts import DEFAULT_CONFLICT_DURATION_MINUTES
from booking_app.application.scheduling.timezone import day_key_of
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.domain.entities.event import (
    APPOINTMENT_ADJUSTED,
    APPOINTMENT_AWAITING_PAYMENT,
    APPOINTMENT_CANCELLED,
    APPOINTMENT_CONFIRMED,
    APPOINTMENT_EXPIRED,
    AppointmentEvent,
)

S = AppointmentStatus

TRANSITIONS: dict[str, dict[AppointmentStatus, AppointmentStatus]] = {
    "propose_adjustment": {S.requested: S.adjusted},
    "accept_adjustment": {S.adjusted: S.confirmed},
    "reject_adjustment": {S.adjusted: S.cancelled},
    "request_payment": {S.requested: S.awaiting_payment},
    "confirm": {S.requested: S.confirmed},
    "record_payment": {S.awaiting_payment: S.confirmed},
    "expire": {S.awaiting_payment: S.expired},
    "cancel": {
        S.requested: S.cancelled,
        S.adjusted: S.cancelled,
        S.awaiting_payment: S.cancelled,
        S.confirmed: S.cancelled,
    },
}

# Replays from webhooks and the expiry sweep land here and are no-ops.
IDEMPOTENT_REPLAYS: dict[str, AppointmentStatus] = {
    "record_payment": S.confirmed,
    "expire": S.expired,
}


@dataclass(frozen=True)
class TransitionResult:
    appointment: Appointment
    event: AppointmentEvent | None

    @property
    def changed(self) -> bool:
        return self.event is not None


def _target(appointment: Appointment, action: str) -> AppointmentStatus:
    targets = TRANSITIONS.get(action)
    if targets is None or appointment.status not in targets:
        raise IllegalTransitionError(appointment.id, appointment.status.value, action)
    return targets[appointment.status]


def _result(appointment: Appointment, event_type: str) -> TransitionResult:
    return TransitionResult(appointment, AppointmentEvent(type=event_type, appointment_id=appointment.id))


def propose_adjustment(
    appointment: Appointment,
    start: datetime,
    end: datetime,
    now: datetime,
    tz: ZoneInfo,
    admin_notes: str | None = None,
) -> TransitionResult:
    """Operator proposes a different time; requested_start_at is kept for before/after display."""
    if end <= start:
        raise ValueError("Adjusted end must be after adjusted start")
    status = _target(appointment, "propose_adjustment")
    updated = replace(
        appointment,
        status=status,
        final_start_at=start,
        final_end_at=end,
        duration_minutes=int((end - start).total_seconds() // 60),
        day_key=day_key_of(start, tz),
        admin_notes=admin_notes if admin_notes is not None else appointment.admin_notes,
        updated_at=now,
    )
    return _result(updated, APPOINTMENT_ADJUSTED)


def accept_adjustment(appointment: Appointment, now: datetime) -> TransitionResult:
    status = _target(appointment, "accept_adjustment")
    return _result(replace(appointment, status=status, updated_at=now), APPOINTMENT_CONFIRMED)


def reject_adjustment(appointment: Appointment, now: datetime) -> TransitionResult:
    status = _target(appointment, "reject_adjustment")
    updated = replace(appointment, status=status, cancelled_by="client", updated_at=now)
    return _result(updated, APPOINTMENT_CANCELLED)


def approve(
    appointment: Appointment,
    now: datetime,
    tz: ZoneInfo,
    deposit_amount: float | None = None,
    payment_due_at: datetime | None = None,
    admin_notes: str | None = None,
) -> TransitionResult:
    """
    Operator approves the requested time as is.

    With a deposit the appointment waits for payment until payment_due_at;
    without one it is confirmed directly and the requested time is frozen as
    the final interval.
    """
    notes = admin_notes if admin_notes is not None else appointment.admin_notes

    if deposit_amount is not None:
        if deposit_amount <= 0:
            raise ValueError("Deposit amount must be positive")
        if payment_due_at is None:
            raise ValueError("payment_due_at is required when a deposit is requested")
        status = _target(appointment, "request_payment")
        updated = replace(
            appointment,
            status=status,
            deposit_amount=deposit_amount,
            payment_due_at=payment_due_at,
            admin_notes=notes,
            updated_at=now,
        )
        return _result(updated, APPOINTMENT_AWAITING_PAYMENT)

    status = _target(appointment, "confirm")
    start = appointment.requested_start_at
    duration = appointment.duration_minutes or DEFAULT_CONFLICT_DURATION_MINUTES
    updated = replace(
        appointment,
        status=status,
        final_start_at=start,
        final_end_at=start + timedelta(minutes=duration),
        duration_minutes=duration,
        day_key=day_key_of(start, tz),
        admin_notes=notes,
        updated_at=now,
    )
    return _result(updated, APPOINTMENT_CONFIRMED)


def record_payment(
    appointment: Appointment,
    now: datetime,
    payment_id: str | None = None,
    payment_status: str | None = "approved",
) -> TransitionResult:
    """Payment provider confirmed the deposit. Replays are no-ops."""
    if appointment.status == IDEMPOTENT_REPLAYS["record_payment"]:
        return TransitionResult(appointment, None)
    status = _target(appointment, "record_payment")
    updated = replace(
        appointment,
        status=status,
        payment_id=payment_id or appointment.payment_id,
        payment_status=payment_status,
        updated_at=now,
    )
    return _result(updated, APPOINTMENT_CONFIRMED)


def expire(appointment: Appointment, now: datetime) -> TransitionResult:
    if appointment.status == IDEMPOTENT_REPLAYS["expire"]:
        return TransitionResult(appointment, None)
    status = _target(appointment, "expire")
    if appointment.payment_due_at is not None and appointment.payment_due_at > now:
        raise IllegalTransitionError(appointment.id, appointment.status.value, "expire before payment deadline")
    return _result(replace(appointment, status=status, updated_at=now), APPOINTMENT_EXPIRED)


def cancel(appointment: Appointment, now: datetime, by: str | None = None) -> TransitionResult:
    status = _target(appointment, "cancel")
    updated = replace(appointment, status=status, cancelled_by=by, updated_at=now)
    return _result(updated, APPOINTMENT_CANCELLED)
