from abc import ABC, abstractmethod

from booking_app.domain.entities.global_settings import GlobalSettings


class SettingsStorePort(ABC):
    @abstractmethod
    def get_settings(self) -> GlobalSettings | None:
        raise NotImplementedError

    @abstractmethod
    def save_settings(self, settings: GlobalSettings) -> None:
        raise NotImplementedError
