from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from booking_app.application.exceptions import ConfigurationError
from booking_app.application.scheduling.slots import format_slots, generate_slots, materialize_slots
from booking_app.domain.entities.slot import DayWindow

from factories import MONDAY, TZ, at

MORNING = DayWindow(day_key=MONDAY, start_minute=9 * 60, end_minute=12 * 60)


def test_morning_window_yields_half_hour_starts_that_fit():
    slots = generate_slots(MORNING, interval_minutes=30, service_duration_minutes=60)
    assert format_slots(slots) == ["09:00", "09:30", "10:00", "10:30", "11:00"]


def test_every_slot_fits_inside_window():
    for interval, duration in [(15, 45), (30, 90), (20, 60), (60, 180)]:
        slots = generate_slots(MORNING, interval, duration)
        assert slots == sorted(slots)
        for start in slots:
            assert start >= MORNING.start_minute
            assert start + duration <= MORNING.end_minute
            assert (start - MORNING.start_minute) % interval == 0


def test_service_longer_than_window_has_no_slots():
    assert generate_slots(MORNING, 30, 240) == []


def test_service_exactly_filling_window_has_one_slot():
    assert generate_slots(MORNING, 30, 180) == [9 * 60]


@pytest.mark.parametrize("interval,duration", [(0, 60), (-30, 60), (30, 0)])
def test_non_positive_interval_or_duration_is_a_configuration_error(interval, duration):
    with pytest.raises(ConfigurationError):
        generate_slots(MORNING, interval, duration)


def test_materialized_slots_carry_utc_interval_and_label():
    slots = materialize_slots(MONDAY, [9 * 60, 9 * 60 + 30], 60, TZ)
    assert [s.label for s in slots] == ["09:00", "09:30"]
    assert slots[0].start == at(MONDAY, "09:00")
    assert slots[0].end == at(MONDAY, "10:00")


def test_slot_generation_is_repeatable():
    assert generate_slots(MORNING, 20, 45) == generate_slots(MORNING, 20, 45)
    assert materialize_slots(MONDAY, [540, 600], 60, TZ) == materialize_slots(MONDAY, [540, 600], 60, TZ)


NEW_YORK = ZoneInfo("America/New_York")


def test_spring_forward_day_skips_the_missing_hour():
    window = DayWindow(day_key="2026-03-08", start_minute=60, end_minute=5 * 60)
    slots = materialize_slots("2026-03-08", generate_slots(window, 60, 60), 60, NEW_YORK)

    assert [s.label for s in slots] == ["01:00", "03:00", "04:00"]
    assert len({s.start for s in slots}) == 3
    assert slots[0].start == datetime(2026, 3, 8, 6, 0, tzinfo=timezone.utc)
    assert slots[1].start == datetime(2026, 3, 8, 7, 0, tzinfo=timezone.utc)


def test_fall_back_day_keeps_one_slot_per_wall_clock_time():
    window = DayWindow(day_key="2026-11-01", start_minute=0, end_minute=4 * 60)
    slots = materialize_slots("2026-11-01", generate_slots(window, 60, 60), 60, NEW_YORK)

    assert [s.label for s in slots] == ["00:00", "01:00", "02:00", "03:00"]
    starts = [s.start for s in slots]
    assert starts == sorted(set(starts))
    # 01:00 resolves to its first (daylight time) occurrence
    assert slots[1].start == datetime(2026, 11, 1, 5, 0, tzinfo=timezone.utc)
    assert slots[2].start == datetime(2026, 11, 1, 7, 0, tzinfo=timezone.utc)
