from __future__ import annotations

import itertools
import threading
import time
from datetime import timedelta

import pytest

from booking_app.application.exceptions import (
    ConfigurationError,
    ConflictError,
    PolicyRejection,
    ServiceNotFound,
)
from booking_app.application.use_cases.book_appointment import BookAppointmentUseCase
from booking_app.application.use_cases.list_slots import ListSlotsUseCase
from booking_app.domain.entities.appointment import AppointmentStatus
from booking_app.domain.entities.event import APPOINTMENT_REQUESTED
from booking_app.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from booking_app.infrastructure.store.memory_store import MemoryAppointmentStore
from booking_app.infrastructure.store.settings_store import MemorySettingsStore

from factories import MONDAY, SUNDAY, RecordingNotifier, at, confirmed, make_appointment, make_service, make_settings


def _wire(settings=None, **catalog):
    counter = itertools.count(1)
    settings_store = MemorySettingsStore(settings if settings is not None else make_settings())
    services = ServiceCatalogStore(catalog or {"haircut": make_service()})
    store = MemoryAppointmentStore(lock_timeout_seconds=2.0)
    notifier = RecordingNotifier()
    book = BookAppointmentUseCase(settings_store, services, store, notifier, id_factory=lambda: f"appt-{next(counter)}")
    slots = ListSlotsUseCase(settings_store, services, store)
    return book, slots, store, notifier


def test_list_slots_applies_hours_lead_time_and_conflicts():
    _, slots, store, _ = _wire()
    store.insert_if_free(confirmed("c1", MONDAY, "10:30", "11:00"), lambda existing: None)

    listing = slots.execute("haircut", MONDAY, now=at(MONDAY, "08:50"))
    # 10:00 and 10:30 overlap the 10:30 booking for a one-hour service
    assert listing.labels == ["11:00"]
    assert listing.timezone == "America/Mexico_City"


def test_list_slots_ignores_cancelled_appointments():
    _, slots, store, _ = _wire()
    store.insert_if_free(
        make_appointment("gone", start=at(MONDAY, "10:00"), status=AppointmentStatus.cancelled),
        lambda existing: None,
    )
    listing = slots.execute("haircut", MONDAY, now=at(MONDAY, "08:50"))
    assert listing.labels == ["10:00", "10:30", "11:00"]


def test_list_slots_closed_day_and_horizon_are_empty():
    _, slots, _, _ = _wire()
    assert slots.execute("haircut", SUNDAY, now=at(SUNDAY, "08:00")).labels == []
    assert slots.execute("haircut", "2026-05-04", now=at(MONDAY, "08:00")).labels == []


def test_list_slots_errors():
    _, slots, _, _ = _wire()
    with pytest.raises(ServiceNotFound):
        slots.execute("unknown", MONDAY, now=at(MONDAY, "08:00"))
    with pytest.raises(ValueError):
        slots.execute("haircut", "02/03/2026", now=at(MONDAY, "08:00"))

    unconfigured = ListSlotsUseCase(
        MemorySettingsStore(), ServiceCatalogStore({"haircut": make_service()}), MemoryAppointmentStore()
    )
    with pytest.raises(ConfigurationError):
        unconfigured.execute("haircut", MONDAY, now=at(MONDAY, "08:00"))


def test_quote_only_service_uses_default_duration():
    _, slots, _, _ = _wire(consult=make_service(id="consult", name="Consultation", price=None, duration_min=None))
    listing = slots.execute("consult", MONDAY, now=at(MONDAY, "07:00"))
    assert listing.labels == ["09:00", "09:30", "10:00", "10:30", "11:00"]


def test_open_days_skip_closed_days_inside_the_horizon():
    _, slots, _, _ = _wire(settings=make_settings(booking_max_days=2))
    # Saturday, Sunday (closed), Monday
    assert slots.open_days(now=at("2026-02-28", "08:00")) == ["2026-02-28", MONDAY]


def test_booking_creates_requested_appointment():
    book, _, store, notifier = _wire()
    result = book.execute("u1", "haircut", at(MONDAY, "10:00"), now=at(MONDAY, "08:00"), notes="short please")

    appt = result.appointment
    assert appt.status == AppointmentStatus.requested
    assert appt.day_key == MONDAY
    assert appt.duration_minutes == 60
    assert appt.price == 350.0
    assert appt.final_start_at is None
    assert store.get(appt.id) == appt
    assert notifier.events == [(APPOINTMENT_REQUESTED, appt.id)]


def test_booking_rejects_policy_violations():
    book, _, store, _ = _wire()
    now = at(MONDAY, "09:30")
    with pytest.raises(PolicyRejection):
        book.execute("u1", "haircut", at(MONDAY, "10:00"), now=now)
    with pytest.raises(PolicyRejection):
        book.execute("u1", "haircut", at(SUNDAY, "10:00") + timedelta(days=7), now=now)
    with pytest.raises(PolicyRejection):
        # off the slot grid
        book.execute("u1", "haircut", at(MONDAY, "10:45"), now=now)
    with pytest.raises(PolicyRejection):
        # would end after closing
        book.execute("u1", "haircut", at(MONDAY, "11:30"), now=now)
    assert store.list_by_day(MONDAY) == []


@pytest.mark.parametrize("offset", [timedelta(seconds=30), timedelta(microseconds=1)])
def test_booking_rejects_start_between_whole_minutes(offset):
    book, _, store, _ = _wire()
    with pytest.raises(PolicyRejection):
        book.execute("u1", "haircut", at(MONDAY, "10:00") + offset, now=at(MONDAY, "07:00"))
    assert store.list_by_day(MONDAY) == []


def test_booking_rejects_taken_slot():
    book, _, store, notifier = _wire()
    now = at(MONDAY, "07:00")
    first = book.execute("u1", "haircut", at(MONDAY, "10:00"), now=now)
    with pytest.raises(ConflictError) as exc_info:
        book.execute("u2", "haircut", at(MONDAY, "10:30"), now=now)
    assert exc_info.value.conflicting_ids == [first.appointment.id]
    assert len(store.list_by_day(MONDAY)) == 1
    assert len(notifier.events) == 1


def test_concurrent_bookings_for_same_slot_yield_one_blocking_appointment():
    book, _, store, _ = _wire()
    now = at(MONDAY, "07:00")
    barrier = threading.Barrier(2)
    outcomes = []

    # Widen the window between the conflict read and the write.
    original_list_by_day = store.list_by_day

    def slow_list_by_day(day_key):
        rows = original_list_by_day(day_key)
        time.sleep(0.05)
        return rows

    store.list_by_day = slow_list_by_day

    def attempt(user_id):
        barrier.wait()
        try:
            book.execute(user_id, "haircut", at(MONDAY, "10:00"), now=now)
            outcomes.append("booked")
        except ConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=attempt, args=(u,)) for u in ("u1", "u2")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["booked", "conflict"]
    blocking = [a for a in original_list_by_day(MONDAY) if a.is_blocking]
    assert len(blocking) == 1
