from __future__ import annotations

import logging

from booking_app.application.exceptions import ConfigurationError
from booking_app.application.ports.settings_store import SettingsStorePort
from booking_app.application.scheduling.business_hours import validate_settings
from booking_app.application.utils.retry import read_with_retry
from booking_app.domain.entities.global_settings import GlobalSettings


def require_settings(store: SettingsStorePort, read_attempts: int = 3) -> GlobalSettings:
    settings = read_with_retry(store.get_settings, attempts=read_attempts)
    if settings is None:
        raise ConfigurationError("Provider settings have not been configured")
    return settings


class UpdateSettingsUseCase:
    def __init__(self, store: SettingsStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def get(self) -> GlobalSettings:
        return require_settings(self._store)

    def execute(self, settings: GlobalSettings) -> GlobalSettings:
        try:
            validate_settings(settings)
        except ConfigurationError as e:
            self._logger.warning("Rejected settings update", extra={"reason": str(e)})
            raise
        self._store.save_settings(settings)
        self._logger.info(
            "Settings saved",
            extra={"timezone": settings.timezone, "interval": settings.slot_interval_minutes},
        )
        return settings
