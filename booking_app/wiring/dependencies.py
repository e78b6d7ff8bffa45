from functools import lru_cache
import logging

from booking_app.core.config import settings
from booking_app.application.ports.appointment_store import AppointmentStorePort
from booking_app.application.ports.notifier import NotificationPort
from booking_app.application.ports.payment_gateway import PaymentGatewayPort
from booking_app.application.ports.service_catalog import ServiceCatalogPort
from booking_app.application.ports.settings_store import SettingsStorePort
from booking_app.application.use_cases.book_appointment import BookAppointmentUseCase
from booking_app.application.use_cases.expire_unpaid import ExpireUnpaidAppointmentsUseCase
from booking_app.application.use_cases.handle_payment_webhook import HandlePaymentWebhookUseCase
from booking_app.application.use_cases.list_slots import ListSlotsUseCase
from booking_app.application.use_cases.manage_appointment import AppointmentLifecycleUseCase
from booking_app.application.use_cases.provider_settings import UpdateSettingsUseCase
from booking_app.infrastructure.catalog.service_catalog_store import JsonServiceCatalogStore, ServiceCatalogStore
from booking_app.infrastructure.notifications.logging_notifier import LoggingNotifier
from booking_app.infrastructure.payments.mercado_pago_client import MercadoPagoGateway
from booking_app.infrastructure.payments.mock_gateway import MockPaymentGateway
from booking_app.infrastructure.store.json_store import JsonAppointmentStore
from booking_app.infrastructure.store.memory_store import MemoryAppointmentStore
from booking_app.infrastructure.store.settings_store import JsonSettingsStore, MemorySettingsStore


_appointment_store: AppointmentStorePort | None = None
_settings_store: SettingsStorePort | None = None
_service_catalog: ServiceCatalogPort | None = None


def _use_json() -> bool:
    return settings.STORE_PROVIDER.lower() == "json"


def get_appointment_store() -> AppointmentStorePort:
    global _appointment_store
    if _appointment_store is None:
        if _use_json():
            _appointment_store = JsonAppointmentStore(
                data_dir=settings.DATA_DIR,
                lock_timeout_seconds=settings.STORE_TIMEOUT_SECONDS,
            )
        else:
            _appointment_store = MemoryAppointmentStore(lock_timeout_seconds=settings.STORE_TIMEOUT_SECONDS)
    return _appointment_store


def get_settings_store() -> SettingsStorePort:
    global _settings_store
    if _settings_store is None:
        _settings_store = JsonSettingsStore(data_dir=settings.DATA_DIR) if _use_json() else MemorySettingsStore()
    return _settings_store


def get_service_catalog() -> ServiceCatalogPort:
    global _service_catalog
    if _service_catalog is None:
        _service_catalog = JsonServiceCatalogStore(data_dir=settings.DATA_DIR) if _use_json() else ServiceCatalogStore()
    return _service_catalog


@lru_cache
def get_notifier() -> NotificationPort:
    return LoggingNotifier()


@lru_cache
def get_payment_gateway() -> PaymentGatewayPort:
    logger = logging.getLogger(__name__)
    if not settings.PAYMENT_ACCESS_TOKEN:
        if settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockPaymentGateway (token missing, ENV=dev/local)")
            return MockPaymentGateway()
        raise ValueError("PAYMENT_ACCESS_TOKEN is required to verify payments.")

    logger.info("Using MercadoPagoGateway")
    return MercadoPagoGateway(
        access_token=settings.PAYMENT_ACCESS_TOKEN,
        base_url=settings.PAYMENT_API_BASE_URL,
        timeout_seconds=settings.PAYMENT_TIMEOUT_SECONDS,
    )


def get_list_slots_use_case() -> ListSlotsUseCase:
    return ListSlotsUseCase(
        settings_store=get_settings_store(),
        catalog=get_service_catalog(),
        appointments=get_appointment_store(),
        read_attempts=settings.STORE_READ_RETRIES,
    )


def get_book_appointment_use_case() -> BookAppointmentUseCase:
    return BookAppointmentUseCase(
        settings_store=get_settings_store(),
        catalog=get_service_catalog(),
        appointments=get_appointment_store(),
        notifier=get_notifier(),
        read_attempts=settings.STORE_READ_RETRIES,
    )


def get_lifecycle_use_case() -> AppointmentLifecycleUseCase:
    return AppointmentLifecycleUseCase(
        settings_store=get_settings_store(),
        appointments=get_appointment_store(),
        notifier=get_notifier(),
        payment_due_hours=settings.PAYMENT_DUE_HOURS,
        read_attempts=settings.STORE_READ_RETRIES,
    )


def get_expire_unpaid_use_case() -> ExpireUnpaidAppointmentsUseCase:
    return ExpireUnpaidAppointmentsUseCase(appointments=get_appointment_store(), notifier=get_notifier())


def get_update_settings_use_case() -> UpdateSettingsUseCase:
    return UpdateSettingsUseCase(store=get_settings_store())


def get_payment_webhook_use_case() -> HandlePaymentWebhookUseCase:
    return HandlePaymentWebhookUseCase(gateway=get_payment_gateway(), lifecycle=get_lifecycle_use_case())
