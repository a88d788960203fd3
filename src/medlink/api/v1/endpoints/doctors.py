"""
Doctor Profile Endpoints.

Exposed routes (all under /api/v1/doctors):
  POST /update                - Create or update the caller's doctor profile
  GET  /get-info              - Profile by email
  GET  ""                     - List with hospital / verification / specialization filters
  GET  /{doctor_id}           - Profile by id
  POST /upload-profile-image  - Store a profile image for the caller's profile
"""
from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Query, UploadFile

from ....core.config import Settings, get_settings
from ....core.exceptions import FileValidationError, ForbiddenError
from ....core.rbac import CurrentDoctor
from ....core.responses import GenericResponse
from ....core.security import SessionEmail
from ....db.session import DbSession
from ....models.enums import VerificationStatus
from ....schemas.doctor import DoctorResponse, DoctorUpsert
from ....services.blob_storage_service import get_blob_storage_service
from ....services.doctor_service import DoctorService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/doctors")

IMAGE_CONTENT_TYPES = ("image/png", "image/jpeg", "image/jpg", "image/webp", "image/gif")


def _get_doctor_service(db: DbSession) -> DoctorService:
    return DoctorService(db)


DoctorServiceDep = Annotated[DoctorService, Depends(_get_doctor_service)]


@router.post(
    "/update",
    response_model=GenericResponse[DoctorResponse],
    summary="Create or update a doctor profile",
    description=(
        "Upsert keyed by email. Creation requires name, specialization and "
        "consultation fees; new profiles start as pending verification."
    ),
    responses={
        400: {"description": "Required field missing on creation"},
        403: {"description": "Email does not belong to the caller"},
        404: {"description": "Referenced hospital not found"},
    },
)
async def upsert_doctor(
    body: DoctorUpsert,
    email: SessionEmail,
    service: DoctorServiceDep,
) -> GenericResponse[DoctorResponse]:
    if body.email.lower() != email:
        raise ForbiddenError(message="You can only update your own profile")

    doctor, created = await service.upsert(email, body.model_dump(exclude={"email"}, exclude_unset=True))
    return GenericResponse(
        message="Doctor profile created" if created else "Doctor profile updated",
        data=DoctorResponse.model_validate(doctor),
    )


@router.get(
    "/get-info",
    response_model=GenericResponse[DoctorResponse],
    summary="Doctor profile by email",
)
async def get_doctor_info(
    service: DoctorServiceDep,
    email: str | None = Query(default=None),
) -> GenericResponse[DoctorResponse]:
    doctor = await service.get_by_email(email)
    return GenericResponse(message="Doctor retrieved", data=DoctorResponse.model_validate(doctor))


@router.get(
    "",
    response_model=GenericResponse[list[DoctorResponse]],
    summary="List doctors",
    description="Best rated first.",
)
async def list_doctors(
    service: DoctorServiceDep,
    hospital_id: str | None = Query(default=None),
    verification_status: VerificationStatus | None = Query(default=None),
    specialization: str | None = Query(default=None, description="Partial, case-insensitive match"),
) -> GenericResponse[list[DoctorResponse]]:
    doctors = await service.doctors.search(
        hospital_id=hospital_id,
        verification_status=verification_status.value if verification_status else None,
        specialization=specialization,
    )
    return GenericResponse(
        message="Doctors retrieved successfully",
        data=[DoctorResponse.model_validate(d) for d in doctors],
    )


@router.get(
    "/{doctor_id}",
    response_model=GenericResponse[DoctorResponse],
    summary="Doctor profile by id",
)
async def get_doctor(doctor_id: str, service: DoctorServiceDep) -> GenericResponse[DoctorResponse]:
    doctor = await service.get(doctor_id)
    return GenericResponse(message="Doctor retrieved", data=DoctorResponse.model_validate(doctor))


@router.post(
    "/upload-profile-image",
    response_model=GenericResponse[DoctorResponse],
    summary="Upload a profile image",
    responses={400: {"description": "Not an image, or too large"}},
)
async def upload_profile_image(
    file: Annotated[UploadFile, File(description="PNG, JPEG, WEBP or GIF image")],
    doctor: CurrentDoctor,
    service: DoctorServiceDep,
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[Any, Depends(get_blob_storage_service)],
) -> GenericResponse[DoctorResponse]:
    if not file.filename:
        raise FileValidationError(message="Filename is required")
    if file.content_type not in IMAGE_CONTENT_TYPES:
        raise FileValidationError(
            message=f"Invalid content type: {file.content_type}",
            filename=file.filename,
        )

    content = await file.read()
    if len(content) > settings.max_file_size_bytes:
        raise FileValidationError(
            message=f"File too large. Maximum size: {settings.MAX_FILE_SIZE_MB}MB",
            filename=file.filename,
        )

    doctor = await service.set_profile_image(
        doctor,
        file_name=file.filename,
        content=content,
        mime_type=file.content_type,
        storage=storage,
    )
    logger.info("doctor_profile_image_updated", doctor_id=doctor.id)
    return GenericResponse(message="Profile image updated", data=DoctorResponse.model_validate(doctor))
