from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from booking_app.application.exceptions import ServiceNotFound
from booking_app.application.ports.appointment_store import AppointmentStorePort
from booking_app.application.ports.service_catalog import ServiceCatalogPort
from booking_app.application.ports.settings_store import SettingsStorePort
from booking_app.application.scheduling.business_hours import window_for
from booking_app.application.scheduling.conflicts import available_slots
from booking_app.application.scheduling.policy import bookable_day_keys, filter_by_policy
from booking_app.application.scheduling.slots import generate_slots, materialize_slots
from booking_app.application.scheduling.timezone import parse_day_key, resolve_timezone, utc_now
from booking_app.application.use_cases.provider_settings import require_settings
from booking_app.application.utils.retry import read_with_retry
from booking_app.domain.entities.slot import CandidateSlot


@dataclass(frozen=True)
class SlotListing:
    day_key: str
    service_id: str
    timezone: str
    slots: list[CandidateSlot]

    @property
    def labels(self) -> list[str]:
        return [slot.label for slot in self.slots]


class ListSlotsUseCase:
    def __init__(
        self,
        settings_store: SettingsStorePort,
        catalog: ServiceCatalogPort,
        appointments: AppointmentStorePort,
        read_attempts: int = 3,
    ) -> None:
        self._settings_store = settings_store
        self._catalog = catalog
        self._appointments = appointments
        self._read_attempts = read_attempts
        self._logger = logging.getLogger(__name__)

    def execute(self, service_id: str, day_key: str, now: datetime | None = None) -> SlotListing:
        now = now or utc_now()
        parse_day_key(day_key)

        service = self._catalog.get_service(service_id)
        if service is None or not service.active:
            raise ServiceNotFound(service_id)

        settings = require_settings(self._settings_store, self._read_attempts)
        tz = resolve_timezone(settings.timezone)
        empty = SlotListing(day_key=day_key, service_id=service_id, timezone=settings.timezone, slots=[])

        window = window_for(day_key, settings)
        if window is None:
            return empty

        duration = service.booking_duration
        offsets = generate_slots(window, settings.slot_interval_minutes, duration)
        offsets = filter_by_policy(day_key, offsets, now, settings)
        if not offsets:
            return empty

        candidates = materialize_slots(day_key, offsets, duration, tz)
        existing = read_with_retry(lambda: self._appointments.list_by_day(day_key), attempts=self._read_attempts)
        free = available_slots(candidates, day_key, existing)

        self._logger.debug(
            "Slots computed",
            extra={"day_key": day_key, "service": service_id, "candidates": len(candidates), "free": len(free)},
        )
        return SlotListing(day_key=day_key, service_id=service_id, timezone=settings.timezone, slots=free)

    def open_days(self, now: datetime | None = None) -> list[str]:
        """Day keys inside the booking horizon on which the calendar is open."""
        settings = require_settings(self._settings_store, self._read_attempts)
        return [day_key for day_key in bookable_day_keys(now or utc_now(), settings) if window_for(day_key, settings)]
