from __future__ import annotations

from datetime import timedelta

import pytest

from booking_app.application.exceptions import IllegalTransitionError
from booking_app.application.scheduling import state_machine as sm
from booking_app.domain.entities.appointment import AppointmentStatus as S
from booking_app.domain.entities.event import (
    APPOINTMENT_ADJUSTED,
    APPOINTMENT_AWAITING_PAYMENT,
    APPOINTMENT_CANCELLED,
    APPOINTMENT_CONFIRMED,
    APPOINTMENT_EXPIRED,
)

from factories import MONDAY, TUESDAY, TZ, at, make_appointment

NOW = at(MONDAY, "08:00")


def _apply(action, appt):
    if action == "propose_adjustment":
        return sm.propose_adjustment(appt, at(MONDAY, "11:00"), at(MONDAY, "12:00"), NOW, TZ)
    if action == "accept_adjustment":
        return sm.accept_adjustment(appt, NOW)
    if action == "reject_adjustment":
        return sm.reject_adjustment(appt, NOW)
    if action == "request_payment":
        return sm.approve(appt, NOW, TZ, deposit_amount=100.0, payment_due_at=NOW + timedelta(hours=24))
    if action == "confirm":
        return sm.approve(appt, NOW, TZ)
    if action == "record_payment":
        return sm.record_payment(appt, NOW, payment_id="p1")
    if action == "expire":
        return sm.expire(appt, NOW + timedelta(days=2))
    if action == "cancel":
        return sm.cancel(appt, NOW, by="operator")
    raise AssertionError(action)


@pytest.mark.parametrize("action", sorted(sm.TRANSITIONS))
@pytest.mark.parametrize("status", list(S))
def test_transition_table_is_exhaustive(action, status):
    appt = make_appointment(status=status, payment_due_at=NOW + timedelta(hours=24))
    allowed = status in sm.TRANSITIONS[action]
    replay = sm.IDEMPOTENT_REPLAYS.get(action) == status

    if allowed:
        result = _apply(action, appt)
        assert result.appointment.status == sm.TRANSITIONS[action][status]
        assert result.changed
    elif replay:
        result = _apply(action, appt)
        assert result.appointment == appt
        assert not result.changed
    else:
        with pytest.raises(IllegalTransitionError):
            _apply(action, appt)


@pytest.mark.parametrize("status", [S.cancelled, S.expired])
def test_terminal_states_admit_no_changes(status):
    appt = make_appointment(status=status)
    for action in ("propose_adjustment", "accept_adjustment", "reject_adjustment", "confirm", "cancel"):
        with pytest.raises(IllegalTransitionError):
            _apply(action, appt)
    assert appt.is_terminal


def test_illegal_transition_leaves_input_unchanged():
    appt = make_appointment(status=S.confirmed)
    with pytest.raises(IllegalTransitionError) as exc_info:
        sm.accept_adjustment(appt, NOW)
    assert appt.status == S.confirmed
    assert exc_info.value.current == "confirmed"


def test_adjustment_sets_final_interval_and_keeps_requested_time():
    appt = make_appointment(start=at(MONDAY, "10:00"))
    result = sm.propose_adjustment(appt, at(MONDAY, "11:00"), at(MONDAY, "11:45"), NOW, TZ, admin_notes="later")
    updated = result.appointment
    assert updated.status == S.adjusted
    assert updated.requested_start_at == at(MONDAY, "10:00")
    assert updated.final_start_at == at(MONDAY, "11:00")
    assert updated.final_end_at == at(MONDAY, "11:45")
    assert updated.duration_minutes == 45
    assert updated.admin_notes == "later"
    assert result.event.type == APPOINTMENT_ADJUSTED


def test_adjustment_across_midnight_recomputes_day_key():
    appt = make_appointment(start=at(MONDAY, "10:00"))
    updated = sm.propose_adjustment(appt, at(TUESDAY, "09:00"), at(TUESDAY, "10:00"), NOW, TZ).appointment
    assert updated.day_key == TUESDAY


def test_adjustment_rejects_empty_interval():
    appt = make_appointment()
    with pytest.raises(ValueError):
        sm.propose_adjustment(appt, at(MONDAY, "11:00"), at(MONDAY, "11:00"), NOW, TZ)


def test_accept_and_reject_adjustment():
    adjusted = sm.propose_adjustment(make_appointment(), at(MONDAY, "11:00"), at(MONDAY, "12:00"), NOW, TZ).appointment

    accepted = sm.accept_adjustment(adjusted, NOW)
    assert accepted.appointment.status == S.confirmed
    assert accepted.event.type == APPOINTMENT_CONFIRMED

    rejected = sm.reject_adjustment(adjusted, NOW)
    assert rejected.appointment.status == S.cancelled
    assert rejected.appointment.cancelled_by == "client"
    assert rejected.event.type == APPOINTMENT_CANCELLED


def test_direct_confirmation_freezes_requested_time():
    appt = make_appointment(start=at(MONDAY, "10:00"), duration_minutes=90)
    result = sm.approve(appt, NOW, TZ)
    assert result.appointment.status == S.confirmed
    assert result.appointment.final_start_at == at(MONDAY, "10:00")
    assert result.appointment.final_end_at == at(MONDAY, "11:30")


def test_deposit_moves_to_awaiting_payment():
    due = NOW + timedelta(hours=24)
    result = sm.approve(make_appointment(), NOW, TZ, deposit_amount=150.0, payment_due_at=due)
    assert result.appointment.status == S.awaiting_payment
    assert result.appointment.deposit_amount == 150.0
    assert result.appointment.payment_due_at == due
    assert result.event.type == APPOINTMENT_AWAITING_PAYMENT


def test_deposit_requires_positive_amount_and_deadline():
    with pytest.raises(ValueError):
        sm.approve(make_appointment(), NOW, TZ, deposit_amount=0, payment_due_at=NOW)
    with pytest.raises(ValueError):
        sm.approve(make_appointment(), NOW, TZ, deposit_amount=100.0)


def test_payment_is_idempotent():
    awaiting = make_appointment(status=S.awaiting_payment, payment_due_at=NOW + timedelta(hours=24))
    first = sm.record_payment(awaiting, NOW, payment_id="p1")
    assert first.appointment.status == S.confirmed
    assert first.appointment.payment_id == "p1"

    second = sm.record_payment(first.appointment, NOW, payment_id="p1")
    assert second.appointment == first.appointment
    assert second.event is None


def test_expiry_waits_for_deadline_and_is_idempotent():
    due = NOW + timedelta(hours=24)
    awaiting = make_appointment(status=S.awaiting_payment, payment_due_at=due)

    with pytest.raises(IllegalTransitionError):
        sm.expire(awaiting, due - timedelta(minutes=1))

    result = sm.expire(awaiting, due)
    assert result.appointment.status == S.expired
    assert result.event.type == APPOINTMENT_EXPIRED
    assert not sm.expire(result.appointment, due).changed


def test_cancel_records_who_cancelled():
    result = sm.cancel(make_appointment(status=S.confirmed), NOW, by="client")
    assert result.appointment.cancelled_by == "client"
    assert not result.appointment.is_blocking
