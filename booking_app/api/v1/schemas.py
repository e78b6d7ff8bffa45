from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from booking_app.domain.entities.appointment import Appointment, AppointmentStatus
from booking_app.domain.entities.global_settings import (
    DEFAULT_BOOKING_MAX_DAYS,
    DEFAULT_BOOKING_MIN_LEAD_MINUTES,
    DEFAULT_SLOT_INTERVAL_MINUTES,
    BusinessDay,
    GlobalSettings,
)
from booking_app.domain.entities.service import Service


class CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotListSchema(CamelSchema):
    day_key: str
    service_id: str
    timezone: str
    slots: list[str]


class OpenDaysSchema(CamelSchema):
    days: list[str]


class BookRequestSchema(CamelSchema):
    user_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    start: datetime
    notes: str | None = None


class AdjustRequestSchema(CamelSchema):
    start: datetime
    end: datetime | None = None
    admin_notes: str | None = None


class ApproveRequestSchema(CamelSchema):
    deposit_amount: float | None = Field(default=None, gt=0)
    admin_notes: str | None = None


class CancelRequestSchema(CamelSchema):
    by: str = Field(default="client", pattern="^(client|operator)$")


class AppointmentSchema(CamelSchema):
    id: str
    user_id: str
    service_id: str
    service_name: str
    price: float | None = None
    requested_start_at: datetime
    final_start_at: datetime | None = None
    final_end_at: datetime | None = None
    day_key: str
    duration_minutes: int | None = None
    notes: str | None = None
    admin_notes: str | None = None
    deposit_amount: float | None = None
    payment_due_at: datetime | None = None
    payment_id: str | None = None
    payment_status: str | None = None
    cancelled_by: str | None = None
    status: AppointmentStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, appt: Appointment) -> "AppointmentSchema":
        return cls(
            id=appt.id,
            user_id=appt.user_id,
            service_id=appt.service_id,
            service_name=appt.service_name,
            price=appt.price,
            requested_start_at=appt.requested_start_at,
            final_start_at=appt.final_start_at,
            final_end_at=appt.final_end_at,
            day_key=appt.day_key,
            duration_minutes=appt.duration_minutes,
            notes=appt.notes,
            admin_notes=appt.admin_notes,
            deposit_amount=appt.deposit_amount,
            payment_due_at=appt.payment_due_at,
            payment_id=appt.payment_id,
            payment_status=appt.payment_status,
            cancelled_by=appt.cancelled_by,
            status=appt.status,
            created_at=appt.created_at,
            updated_at=appt.updated_at,
        )


class TransitionResponseSchema(CamelSchema):
    appointment: AppointmentSchema
    event: str | None = None


class BusinessDaySchema(CamelSchema):
    enabled: bool = False
    start: str = "09:00"
    end: str = "18:00"


class SettingsSchema(CamelSchema):
    timezone: str
    business_hours: dict[str, BusinessDaySchema] = Field(default_factory=dict)
    slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES
    booking_min_lead_minutes: int = DEFAULT_BOOKING_MIN_LEAD_MINUTES
    booking_max_days: int = DEFAULT_BOOKING_MAX_DAYS
    payments_enabled: bool = False
    admin_phone: str | None = None
    admin_email: str | None = None

    def to_entity(self) -> GlobalSettings:
        return GlobalSettings(
            timezone=self.timezone,
            business_hours={
                key: BusinessDay(enabled=day.enabled, start=day.start, end=day.end)
                for key, day in self.business_hours.items()
            },
            slot_interval_minutes=self.slot_interval_minutes,
            booking_min_lead_minutes=self.booking_min_lead_minutes,
            booking_max_days=self.booking_max_days,
            payments_enabled=self.payments_enabled,
            admin_phone=self.admin_phone,
            admin_email=self.admin_email,
        )

    @classmethod
    def from_entity(cls, settings: GlobalSettings) -> "SettingsSchema":
        return cls(
            timezone=settings.timezone,
            business_hours={
                key: BusinessDaySchema(enabled=day.enabled, start=day.start, end=day.end)
                for key, day in settings.business_hours.items()
            },
            slot_interval_minutes=settings.slot_interval_minutes,
            booking_min_lead_minutes=settings.booking_min_lead_minutes,
            booking_max_days=settings.booking_max_days,
            payments_enabled=settings.payments_enabled,
            admin_phone=settings.admin_phone,
            admin_email=settings.admin_email,
        )


class ServiceSchema(CamelSchema):
    id: str
    name: str
    duration_min: int | None = Field(default=None, gt=0)
    duration_max: int | None = Field(default=None, gt=0)
    price: float | None = None
    active: bool = True

    def to_entity(self) -> Service:
        return Service(
            id=self.id,
            name=self.name,
            duration_min=self.duration_min,
            duration_max=self.duration_max,
            price=self.price,
            active=self.active,
        )

    @classmethod
    def from_entity(cls, service: Service) -> "ServiceSchema":
        return cls(
            id=service.id,
            name=service.name,
            duration_min=service.duration_min,
            duration_max=service.duration_max,
            price=service.price,
            active=service.active,
        )


class SweepResponseSchema(BaseModel):
    expired: int


class WebhookResponseSchema(CamelSchema):
    action: str
    appointment_id: str | None = None
    reason: str | None = None
