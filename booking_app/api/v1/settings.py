from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from booking_app.api.errors import to_http_exception
from booking_app.api.v1.operator import require_operator
from booking_app.api.v1.schemas import ServiceSchema, SettingsSchema
from booking_app.application.exceptions import SchedulingError
from booking_app.application.ports.service_catalog import ServiceCatalogPort
from booking_app.application.use_cases.provider_settings import UpdateSettingsUseCase
from booking_app.wiring.dependencies import get_service_catalog, get_update_settings_use_case

router = APIRouter()


@router.get("/settings", response_model=SettingsSchema)
def get_settings(uc: UpdateSettingsUseCase = Depends(get_update_settings_use_case)):
    try:
        return SettingsSchema.from_entity(uc.get())
    except SchedulingError as e:
        raise to_http_exception(e)


@router.put("/settings", response_model=SettingsSchema, dependencies=[Depends(require_operator)])
def put_settings(
    req: SettingsSchema,
    uc: UpdateSettingsUseCase = Depends(get_update_settings_use_case),
):
    try:
        saved = uc.execute(req.to_entity())
    except SchedulingError as e:
        raise to_http_exception(e)
    return SettingsSchema.from_entity(saved)


@router.get("/services", response_model=list[ServiceSchema])
def list_services(catalog: ServiceCatalogPort = Depends(get_service_catalog)):
    try:
        return [ServiceSchema.from_entity(s) for s in catalog.list_services()]
    except SchedulingError as e:
        raise to_http_exception(e)


@router.put("/services/{service_id}", response_model=ServiceSchema, dependencies=[Depends(require_operator)])
def put_service(
    service_id: str,
    req: ServiceSchema,
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
):
    if req.id != service_id:
        raise HTTPException(status_code=400, detail="Service id in body does not match the path")
    try:
        catalog.put_service(req.to_entity())
    except SchedulingError as e:
        raise to_http_exception(e)
    return req
