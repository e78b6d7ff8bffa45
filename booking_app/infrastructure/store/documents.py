"""Field-exact mapping between entities and persisted documents (camelCase, ISO-8601 instants)."""

from __future__ import annotations

from typing import Any

from booking_app.application.scheduling.timezone import parse_instant, to_iso
from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.domain.entities.global_settings import (
    DEFAULT_BOOKING_MAX_DAYS,
    DEFAULT_BOOKING_MIN_LEAD_MINUTES,
    DEFAULT_SLOT_INTERVAL_MINUTES,
    BusinessDay,
    GlobalSettings,
)
from booking_app.domain.entities.service import Service


def appointment_to_document(appt: Appointment) -> dict[str, Any]:
    return {
        "id": appt.id,
        "userId": appt.user_id,
        "serviceId": appt.service_id,
        "serviceName": appt.service_name,
        "price": appt.price,
        "requestedStartAt": to_iso(appt.requested_start_at),
        "finalStartAt": to_iso(appt.final_start_at),
        "finalEndAt": to_iso(appt.final_end_at),
        "dayKey": appt.day_key,
        "durationMinutes": appt.duration_minutes,
        "notes": appt.notes,
        "adminNotes": appt.admin_notes,
        "depositAmount": appt.deposit_amount,
        "paymentDueAt": to_iso(appt.payment_due_at),
        "paymentId": appt.payment_id,
        "paymentStatus": appt.payment_status,
        "cancelledBy": appt.cancelled_by,
        "status": appt.status.value,
        "createdAt": to_iso(appt.created_at),
        "updatedAt": to_iso(appt.updated_at),
    }


def appointment_from_document(data: dict[str, Any]) -> Appointment:
    return Appointment(
        id=str(data["id"]),
        user_id=str(data["userId"]),
        service_id=str(data["serviceId"]),
        service_name=data.get("serviceName") or "",
        price=data.get("price"),
        requested_start_at=parse_instant(data["requestedStartAt"]),
        final_start_at=parse_instant(data.get("finalStartAt")),
        final_end_at=parse_instant(data.get("finalEndAt")),
        day_key=data["dayKey"],
        duration_minutes=data.get("durationMinutes"),
        notes=data.get("notes"),
        admin_notes=data.get("adminNotes"),
        deposit_amount=data.get("depositAmount"),
        payment_due_at=parse_instant(data.get("paymentDueAt")),
        payment_id=data.get("paymentId"),
        payment_status=data.get("paymentStatus"),
        cancelled_by=data.get("cancelledBy"),
        status=AppointmentStatus(data.get("status", "requested")),
        created_at=parse_instant(data.get("createdAt")),
        updated_at=parse_instant(data.get("updatedAt")),
    )


def settings_to_document(settings: GlobalSettings) -> dict[str, Any]:
    return {
        "timezone": settings.timezone,
        "businessHours": {
            key: {"enabled": day.enabled, "start": day.start, "end": day.end}
            for key, day in settings.business_hours.items()
        },
        "slotIntervalMinutes": settings.slot_interval_minutes,
        "bookingMinLeadMinutes": settings.booking_min_lead_minutes,
        "bookingMaxDays": settings.booking_max_days,
        "paymentsEnabled": settings.payments_enabled,
        "adminPhone": settings.admin_phone,
        "adminEmail": settings.admin_email,
    }


def settings_from_document(data: dict[str, Any]) -> GlobalSettings:
    hours = {
        key: BusinessDay(
            enabled=bool(day.get("enabled", False)),
            start=str(day.get("start", "")),
            end=str(day.get("end", "")),
        )
        for key, day in (data.get("businessHours") or {}).items()
    }

    def _int(name: str, default: int) -> int:
        value = data.get(name)
        return default if value is None else int(value)

    return GlobalSettings(
        timezone=str(data.get("timezone") or ""),
        business_hours=hours,
        slot_interval_minutes=_int("slotIntervalMinutes", DEFAULT_SLOT_INTERVAL_MINUTES),
        booking_min_lead_minutes=_int("bookingMinLeadMinutes", DEFAULT_BOOKING_MIN_LEAD_MINUTES),
        booking_max_days=_int("bookingMaxDays", DEFAULT_BOOKING_MAX_DAYS),
        payments_enabled=bool(data.get("paymentsEnabled", False)),
        admin_phone=data.get("adminPhone"),
        admin_email=data.get("adminEmail"),
    )


def service_to_document(service: Service) -> dict[str, Any]:
    return {
        "id": service.id,
        "name": service.name,
        "durationMin": service.duration_min,
        "durationMax": service.duration_max,
        "price": service.price,
        "active": service.active,
    }


def service_from_document(data: dict[str, Any]) -> Service:
    return Service(
        id=str(data["id"]),
        name=data.get("name") or "",
        duration_min=data.get("durationMin"),
        duration_max=data.get("durationMax"),
        price=data.get("price"),
        active=bool(data.get("active", True)),
    )
