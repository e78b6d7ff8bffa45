from __future__ import annotations

import threading
from pathlib import Path

from booking_app.application.ports.service_catalog import ServiceCatalogPort
from booking_app.domain.entities.service import Service
from booking_app.infrastructure.store.documents import service_from_document, service_to_document
from booking_app.infrastructure.store.json_store import read_json, write_json_atomic


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, Service] | None = None) -> None:
        self._catalog = dict(catalog or {})

    def get_service(self, service_id: str) -> Service | None:
        return self._catalog.get(service_id.strip())

    def list_services(self, active_only: bool = True) -> list[Service]:
        services = [s for s in self._catalog.values() if s.active or not active_only]
        return sorted(services, key=lambda s: s.name.lower())

    def put_service(self, service: Service) -> None:
        self._catalog[service.id] = service


class JsonServiceCatalogStore(ServiceCatalogPort):
    """All services in one document at data_dir/services.json ({"services": [...]})."""

    def __init__(self, data_dir: str = "./data") -> None:
        self._file_path = Path(data_dir) / "services.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Service]:
        data = read_json(self._file_path) or {}
        services = [service_from_document(row) for row in data.get("services", [])]
        return {s.id: s for s in services}

    def get_service(self, service_id: str) -> Service | None:
        with self._lock:
            return self._load().get(service_id.strip())

    def list_services(self, active_only: bool = True) -> list[Service]:
        with self._lock:
            services = [s for s in self._load().values() if s.active or not active_only]
        return sorted(services, key=lambda s: s.name.lower())

    def put_service(self, service: Service) -> None:
        with self._lock:
            catalog = self._load()
            catalog[service.id] = service
            write_json_atomic(self._file_path, {"services": [service_to_document(s) for s in catalog.values()]})
