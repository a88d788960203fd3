"""
Prescription Endpoints.

Exposed routes (all under /api/v1/prescriptions):
  POST   ""              - Create (doctor only)
  GET    ""              - Doctor: authored prescriptions; patient: own prescriptions
  GET    /check          - Does the appointment already have a prescription?
  GET    /{id}           - Single prescription (author or patient)
  PUT    /{id}           - Partial update (author only)
  DELETE /{id}           - Soft cancel (author only)
  POST   /{id}/share     - Export as PDF and return a short-lived download link
"""
from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query, status

from ....core.rbac import CurrentActor, CurrentDoctor
from ....core.responses import GenericResponse
from ....db.session import DbSession
from ....models.enums import PrescriptionStatus
from ....schemas.common import MessageResponse
from ....schemas.prescription import (
    PrescriptionCheck,
    PrescriptionCreate,
    PrescriptionEnvelope,
    PrescriptionList,
    PrescriptionResponse,
    PrescriptionShare,
    PrescriptionUpdate,
    medications_payload,
)
from ....services.blob_storage_service import get_blob_storage_service
from ....services.prescription_service import PrescriptionService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/prescriptions")


def _get_prescription_service(db: DbSession) -> PrescriptionService:
    return PrescriptionService(db)


PrescriptionServiceDep = Annotated[PrescriptionService, Depends(_get_prescription_service)]


def _envelope(prescription) -> PrescriptionEnvelope:
    return PrescriptionEnvelope(prescription=PrescriptionResponse.model_validate(prescription))


@router.post(
    "",
    response_model=GenericResponse[PrescriptionEnvelope],
    status_code=status.HTTP_201_CREATED,
    summary="Create a prescription",
    responses={
        400: {"description": "Missing fields or incomplete medication entry"},
        403: {"description": "Caller has no doctor profile"},
        404: {"description": "Patient not found"},
        409: {"description": "Appointment already has a prescription"},
    },
)
async def create_prescription(
    body: PrescriptionCreate,
    doctor: CurrentDoctor,
    service: PrescriptionServiceDep,
) -> GenericResponse[PrescriptionEnvelope]:
    prescription = await service.create(
        doctor,
        patient_id=body.patient_id,
        appointment_id=body.appointment_id,
        medications=medications_payload(body.medications),
        notes=body.notes,
        follow_up_date=body.follow_up_date,
    )
    return GenericResponse(message="Prescription created successfully", data=_envelope(prescription))


@router.get(
    "",
    response_model=GenericResponse[PrescriptionList],
    summary="List prescriptions for the caller",
)
async def list_prescriptions(
    actor: CurrentActor,
    service: PrescriptionServiceDep,
    patient_id: str | None = Query(default=None, description="Doctors only: narrow to one patient"),
    prescription_status: PrescriptionStatus | None = Query(default=None, alias="status"),
) -> GenericResponse[PrescriptionList]:
    prescriptions = await service.list_for(
        actor,
        patient_id=patient_id,
        status=prescription_status.value if prescription_status else None,
    )
    return GenericResponse(
        message=f"Found {len(prescriptions)} prescription(s)",
        data=PrescriptionList(
            prescriptions=[PrescriptionResponse.model_validate(p) for p in prescriptions],
        ),
    )


@router.get(
    "/check",
    response_model=GenericResponse[PrescriptionCheck],
    summary="Check whether an appointment has a prescription",
)
async def check_prescription(
    service: PrescriptionServiceDep,
    appointment_id: str | None = Query(default=None, description="Appointment to look up"),
) -> GenericResponse[PrescriptionCheck]:
    prescription = await service.check(appointment_id)
    data = PrescriptionCheck(
        exists=prescription is not None,
        prescription=PrescriptionResponse.model_validate(prescription) if prescription else None,
    )
    return GenericResponse(message="Prescription check complete", data=data)


@router.get(
    "/{prescription_id}",
    response_model=GenericResponse[PrescriptionEnvelope],
    summary="Get a prescription",
)
async def get_prescription(
    prescription_id: str,
    actor: CurrentActor,
    service: PrescriptionServiceDep,
) -> GenericResponse[PrescriptionEnvelope]:
    prescription = await service.get(prescription_id, actor)
    return GenericResponse(message="Prescription retrieved", data=_envelope(prescription))


@router.put(
    "/{prescription_id}",
    response_model=GenericResponse[PrescriptionEnvelope],
    summary="Update a prescription",
    description="Only the authoring doctor may update. Supplied medications replace the list.",
)
async def update_prescription(
    prescription_id: str,
    body: PrescriptionUpdate,
    doctor: CurrentDoctor,
    service: PrescriptionServiceDep,
) -> GenericResponse[PrescriptionEnvelope]:
    changes = body.model_dump(exclude_unset=True)
    if "medications" in changes:
        changes["medications"] = medications_payload(body.medications)
    prescription = await service.update(prescription_id, doctor, changes)
    return GenericResponse(message="Prescription updated successfully", data=_envelope(prescription))


@router.delete(
    "/{prescription_id}",
    response_model=GenericResponse[MessageResponse],
    summary="Cancel a prescription",
    description="Soft delete: the status becomes Cancelled and the record is kept.",
)
async def cancel_prescription(
    prescription_id: str,
    doctor: CurrentDoctor,
    service: PrescriptionServiceDep,
) -> GenericResponse[MessageResponse]:
    await service.cancel(prescription_id, doctor)
    return GenericResponse(
        message="Prescription cancelled",
        data=MessageResponse(message="Prescription cancelled successfully"),
    )


@router.post(
    "/{prescription_id}/share",
    response_model=GenericResponse[PrescriptionShare],
    summary="Share a prescription as PDF",
)
async def share_prescription(
    prescription_id: str,
    actor: CurrentActor,
    service: PrescriptionServiceDep,
    storage: Annotated[Any, Depends(get_blob_storage_service)],
) -> GenericResponse[PrescriptionShare]:
    url, key, expires_in = await service.share(prescription_id, actor, storage)
    return GenericResponse(
        message="Share link created",
        data=PrescriptionShare(url=url, key=key, expires_in=expires_in),
    )
