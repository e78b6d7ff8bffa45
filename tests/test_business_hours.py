from __future__ import annotations

import pytest

from booking_app.application.exceptions import ConfigurationError
from booking_app.application.scheduling.business_hours import validate_settings, window_for
from booking_app.domain.entities.global_settings import BusinessDay

from factories import MONDAY, SUNDAY, make_settings


def test_window_for_open_day():
    window = window_for(MONDAY, make_settings())
    assert window is not None
    assert window.day_key == MONDAY
    assert (window.start_minute, window.end_minute) == (9 * 60, 12 * 60)


def test_window_for_disabled_or_missing_day_is_closed():
    settings = make_settings()
    assert window_for(SUNDAY, settings) is None

    hours = dict(settings.business_hours)
    del hours["mon"]
    assert window_for(MONDAY, make_settings(business_hours=hours)) is None


def test_window_for_rejects_inverted_hours():
    hours = dict(make_settings().business_hours)
    hours["mon"] = BusinessDay(enabled=True, start="12:00", end="09:00")
    with pytest.raises(ConfigurationError):
        window_for(MONDAY, make_settings(business_hours=hours))


def test_validate_accepts_default_settings():
    settings = make_settings()
    assert validate_settings(settings) is settings


def test_disabled_day_may_have_any_valid_times():
    hours = dict(make_settings().business_hours)
    hours["sun"] = BusinessDay(enabled=False, start="18:00", end="09:00")
    validate_settings(make_settings(business_hours=hours))


@pytest.mark.parametrize(
    "overrides",
    [
        {"timezone": "Not/AZone"},
        {"slot_interval_minutes": 0},
        {"booking_min_lead_minutes": -5},
        {"booking_max_days": -1},
        {"business_hours": {"monday": BusinessDay(enabled=True)}},
        {"business_hours": {"mon": BusinessDay(enabled=True, start="9am", end="18:00")}},
        {"business_hours": {"mon": BusinessDay(enabled=True, start="10:00", end="10:00")}},
    ],
)
def test_validate_rejects_malformed_settings(overrides):
    with pytest.raises(ConfigurationError):
        validate_settings(make_settings(**overrides))
