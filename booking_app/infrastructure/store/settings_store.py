from __future__ import annotations

import threading
from pathlib import Path

from booking_app.application.ports.settings_store import SettingsStorePort
from booking_app.domain.entities.global_settings import GlobalSettings
from booking_app.infrastructure.store.documents import settings_from_document, settings_to_document
from booking_app.infrastructure.store.json_store import read_json, write_json_atomic


class MemorySettingsStore(SettingsStorePort):
    def __init__(self, settings: GlobalSettings | None = None) -> None:
        self._settings = settings

    def get_settings(self) -> GlobalSettings | None:
        return self._settings

    def save_settings(self, settings: GlobalSettings) -> None:
        self._settings = settings


class JsonSettingsStore(SettingsStorePort):
    """Singleton settings document at data_dir/settings/global.json."""

    def __init__(self, data_dir: str = "./data") -> None:
        self._file_path = Path(data_dir) / "settings" / "global.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def get_settings(self) -> GlobalSettings | None:
        with self._lock:
            data = read_json(self._file_path)
        return settings_from_document(data) if data else None

    def save_settings(self, settings: GlobalSettings) -> None:
        with self._lock:
            write_json_atomic(self._file_path, settings_to_document(settings))
