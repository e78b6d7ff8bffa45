from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from booking_app.api.errors import to_http_exception
from booking_app.api.v1.operator import require_operator
from booking_app.api.v1.schemas import (
    AdjustRequestSchema,
    AppointmentSchema,
    ApproveRequestSchema,
    BookRequestSchema,
    CancelRequestSchema,
    OpenDaysSchema,
    SlotListSchema,
    SweepResponseSchema,
    TransitionResponseSchema,
)
from booking_app.application.exceptions import SchedulingError
from booking_app.application.ports.appointment_store import AppointmentStorePort
from booking_app.application.scheduling.state_machine import TransitionResult
from booking_app.application.scheduling.timezone import parse_instant
from booking_app.application.use_cases.book_appointment import BookAppointmentUseCase
from booking_app.application.use_cases.expire_unpaid import ExpireUnpaidAppointmentsUseCase
from booking_app.application.use_cases.list_slots import ListSlotsUseCase
from booking_app.application.use_cases.manage_appointment import AppointmentLifecycleUseCase
from booking_app.application.utils.retry import read_with_retry
from booking_app.wiring.dependencies import (
    get_appointment_store,
    get_book_appointment_use_case,
    get_expire_unpaid_use_case,
    get_lifecycle_use_case,
    get_list_slots_use_case,
)

router = APIRouter()


def _transition_response(result: TransitionResult) -> TransitionResponseSchema:
    return TransitionResponseSchema(
        appointment=AppointmentSchema.from_entity(result.appointment),
        event=result.event.type if result.event else None,
    )


@router.get("/slots", response_model=SlotListSchema)
def list_slots(
    service_id: str = Query(..., alias="serviceId"),
    day_key: str = Query(..., alias="dayKey", pattern=r"^\d{4}-\d{2}-\d{2}$"),
    uc: ListSlotsUseCase = Depends(get_list_slots_use_case),
):
    try:
        listing = uc.execute(service_id=service_id, day_key=day_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SchedulingError as e:
        raise to_http_exception(e)

    return SlotListSchema(
        day_key=listing.day_key,
        service_id=listing.service_id,
        timezone=listing.timezone,
        slots=listing.labels,
    )


@router.get("/days", response_model=OpenDaysSchema)
def list_open_days(uc: ListSlotsUseCase = Depends(get_list_slots_use_case)):
    try:
        days = uc.open_days()
    except SchedulingError as e:
        raise to_http_exception(e)
    return OpenDaysSchema(days=days)


@router.post("/appointments", response_model=TransitionResponseSchema, status_code=201)
def book_appointment(
    req: BookRequestSchema,
    uc: BookAppointmentUseCase = Depends(get_book_appointment_use_case),
):
    try:
        result = uc.execute(
            user_id=req.user_id,
            service_id=req.service_id,
            start=parse_instant(req.start),
            notes=req.notes,
        )
    except SchedulingError as e:
        raise to_http_exception(e)
    return _transition_response(result)


@router.get("/appointments", response_model=list[AppointmentSchema])
def list_appointments(
    user_id: str | None = Query(None, alias="userId"),
    day_key: str | None = Query(None, alias="dayKey"),
    store: AppointmentStorePort = Depends(get_appointment_store),
):
    if bool(user_id) == bool(day_key):
        raise HTTPException(status_code=400, detail="Pass exactly one of userId or dayKey")
    try:
        if user_id:
            rows = read_with_retry(lambda: store.list_by_user(user_id))
        else:
            rows = read_with_retry(lambda: store.list_by_day(day_key))
    except SchedulingError as e:
        raise to_http_exception(e)
    return [AppointmentSchema.from_entity(a) for a in rows]


@router.get("/appointments/{appointment_id}", response_model=AppointmentSchema)
def get_appointment(
    appointment_id: str,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        appointment = uc.get(appointment_id)
    except SchedulingError as e:
        raise to_http_exception(e)
    return AppointmentSchema.from_entity(appointment)


@router.post(
    "/appointments/{appointment_id}/adjust",
    response_model=TransitionResponseSchema,
    dependencies=[Depends(require_operator)],
)
def propose_adjustment(
    appointment_id: str,
    req: AdjustRequestSchema,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.propose_adjustment(
            appointment_id,
            start=parse_instant(req.start),
            end=parse_instant(req.end),
            admin_notes=req.admin_notes,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SchedulingError as e:
        raise to_http_exception(e)
    return _transition_response(result)


@router.post(
    "/appointments/{appointment_id}/approve",
    response_model=TransitionResponseSchema,
    dependencies=[Depends(require_operator)],
)
def approve_appointment(
    appointment_id: str,
    req: ApproveRequestSchema,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.approve(appointment_id, deposit_amount=req.deposit_amount, admin_notes=req.admin_notes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SchedulingError as e:
        raise to_http_exception(e)
    return _transition_response(result)


@router.post("/appointments/{appointment_id}/accept", response_model=TransitionResponseSchema)
def accept_adjustment(
    appointment_id: str,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.accept_adjustment(appointment_id)
    except SchedulingError as e:
        raise to_http_exception(e)
    return _transition_response(result)


@router.post("/appointments/{appointment_id}/reject", response_model=TransitionResponseSchema)
def reject_adjustment(
    appointment_id: str,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.reject_adjustment(appointment_id)
    except SchedulingError as e:
        raise to_http_exception(e)
    return _transition_response(result)


@router.post("/appointments/{appointment_id}/cancel", response_model=TransitionResponseSchema)
def cancel_appointment(
    appointment_id: str,
    req: CancelRequestSchema,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.cancel(appointment_id, by=req.by)
    except SchedulingError as e:
        raise to_http_exception(e)
    return _transition_response(result)


@router.post(
    "/admin/expire-unpaid",
    response_model=SweepResponseSchema,
    dependencies=[Depends(require_operator)],
)
def expire_unpaid(uc: ExpireUnpaidAppointmentsUseCase = Depends(get_expire_unpaid_use_case)):
    try:
        expired = uc.execute()
    except SchedulingError as e:
        raise to_http_exception(e)
    return SweepResponseSchema(expired=expired)
