"""
Hospital Endpoints.

Exposed routes (all under /api/v1/hospitals):
  POST /update                 - Create or update the caller's hospital (geocodes the address)
  GET  ""                      - List, optional city filter
  GET  /get-info               - Hospital by email
  GET  /{hospital_id}          - Hospital by id
  GET  /{hospital_id}/doctors  - Doctors attached to the hospital
  POST /remove-doctor          - Detach a doctor from the caller's hospital
"""
from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query

from ....core.exceptions import ForbiddenError
from ....core.responses import GenericResponse
from ....core.security import SessionEmail
from ....db.session import DbSession
from ....schemas.doctor import DoctorResponse
from ....schemas.hospital import HospitalResponse, HospitalUpsert, RemoveDoctorRequest
from ....services.geocoding_service import get_geocoding_service
from ....services.hospital_service import HospitalService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/hospitals")


def _get_hospital_service(
    db: DbSession,
    geocoder: Annotated[Any, Depends(get_geocoding_service)],
) -> HospitalService:
    return HospitalService(db, geocoder)


HospitalServiceDep = Annotated[HospitalService, Depends(_get_hospital_service)]


@router.post(
    "/update",
    response_model=GenericResponse[HospitalResponse],
    summary="Create or update a hospital",
    description=(
        "Upsert keyed by email. Without coordinates (or with [0, 0]) the "
        "address is geocoded; if that fails the hospital is saved at [0, 0]."
    ),
)
async def upsert_hospital(
    body: HospitalUpsert,
    email: SessionEmail,
    service: HospitalServiceDep,
) -> GenericResponse[HospitalResponse]:
    if body.email.lower() != email:
        raise ForbiddenError(message="You can only update your own hospital")

    fields = body.model_dump(exclude={"email", "address"}, exclude_unset=True)
    address = body.address.model_dump() if body.address else None
    hospital, created = await service.upsert(email, fields, address)
    return GenericResponse(
        message="Hospital created" if created else "Hospital updated",
        data=HospitalResponse.from_model(hospital),
    )


@router.get(
    "",
    response_model=GenericResponse[list[HospitalResponse]],
    summary="List hospitals",
)
async def list_hospitals(
    service: HospitalServiceDep,
    city: str | None = Query(default=None, description="Case-insensitive exact match"),
) -> GenericResponse[list[HospitalResponse]]:
    hospitals = await service.hospitals.search(city=city)
    return GenericResponse(
        message=f"Found {len(hospitals)} hospital(s)",
        data=[HospitalResponse.from_model(h) for h in hospitals],
    )


@router.get(
    "/get-info",
    response_model=GenericResponse[HospitalResponse],
    summary="Hospital by email",
)
async def get_hospital_info(
    service: HospitalServiceDep,
    email: str | None = Query(default=None),
) -> GenericResponse[HospitalResponse]:
    hospital = await service.get_by_email(email)
    return GenericResponse(message="Hospital retrieved", data=HospitalResponse.from_model(hospital))


@router.post(
    "/remove-doctor",
    response_model=GenericResponse[DoctorResponse],
    summary="Remove a doctor from the caller's hospital",
    description="Clears the doctor's hospital reference; the doctor profile is kept.",
)
async def remove_doctor(
    body: RemoveDoctorRequest,
    email: SessionEmail,
    service: HospitalServiceDep,
) -> GenericResponse[DoctorResponse]:
    hospital = await service.hospitals.get_by_email(email)
    if not hospital:
        raise ForbiddenError(
            message="Only hospitals can perform this action",
            error_code="HOSPITAL_REQUIRED",
        )
    doctor = await service.remove_doctor(hospital, body.doctor_id)
    return GenericResponse(message="Doctor removed from hospital", data=DoctorResponse.model_validate(doctor))


@router.get(
    "/{hospital_id}",
    response_model=GenericResponse[HospitalResponse],
    summary="Hospital by id",
)
async def get_hospital(hospital_id: str, service: HospitalServiceDep) -> GenericResponse[HospitalResponse]:
    hospital = await service.get(hospital_id)
    return GenericResponse(message="Hospital retrieved", data=HospitalResponse.from_model(hospital))


@router.get(
    "/{hospital_id}/doctors",
    response_model=GenericResponse[list[DoctorResponse]],
    summary="Hospital roster",
)
async def list_hospital_doctors(
    hospital_id: str,
    service: HospitalServiceDep,
) -> GenericResponse[list[DoctorResponse]]:
    doctors = await service.roster(hospital_id)
    return GenericResponse(
        message=f"Found {len(doctors)} doctor(s)",
        data=[DoctorResponse.model_validate(d) for d in doctors],
    )
