"""
Doctor Service.

Upserts doctor profiles keyed by email and stores profile images.
"""
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import BadRequestError, DoctorNotFoundError, HospitalNotFoundError
from ..models.doctor import Doctor
from ..models.enums import VerificationStatus
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.hospital_repository import HospitalRepository
from .blob_storage_service import BlobStorage, detect_mime_type

log = structlog.get_logger(__name__)

REQUIRED_ON_CREATE = ("name", "specialization", "consultation_fees")


class DoctorService:
    def __init__(self, session: AsyncSession) -> None:
        self.doctors = DoctorRepository(session)
        self.hospitals = HospitalRepository(session)

    async def upsert(self, email: str, fields: dict[str, Any]) -> tuple[Doctor, bool]:
        """
        Create the profile for ``email`` or apply ``fields`` to the existing one.

        Returns:
            (doctor, created)
        """
        fields = {key: value for key, value in fields.items() if value is not None}
        if isinstance(fields.get("verification_status"), VerificationStatus):
            fields["verification_status"] = fields["verification_status"].value

        if fields.get("hospital_id") and not await self.hospitals.get_by_id(fields["hospital_id"]):
            raise HospitalNotFoundError(fields["hospital_id"])

        doctor = await self.doctors.get_by_email(email)
        if doctor:
            return await self.doctors.apply_changes(doctor, fields), False

        missing = [name for name in REQUIRED_ON_CREATE if fields.get(name) in (None, "")]
        if missing:
            raise BadRequestError(
                message="Name, specialization and consultation fees are required",
                error_code="MISSING_REQUIRED_FIELDS",
                details={"missing": missing},
            )
        fields.setdefault("verification_status", VerificationStatus.PENDING.value)
        doctor = await self.doctors.create(email, fields)
        log.info("doctor_profile_created", doctor_id=doctor.id)
        return doctor, True

    async def get_by_email(self, email: str | None) -> Doctor:
        if not email:
            raise BadRequestError(message="Email is required", error_code="MISSING_REQUIRED_FIELDS")
        doctor = await self.doctors.get_by_email(email)
        if not doctor:
            raise DoctorNotFoundError(email)
        return doctor

    async def get(self, doctor_id: str) -> Doctor:
        doctor = await self.doctors.get_by_id(doctor_id)
        if not doctor:
            raise DoctorNotFoundError(doctor_id)
        return doctor

    async def set_profile_image(
        self,
        doctor: Doctor,
        *,
        file_name: str,
        content: bytes,
        mime_type: str | None,
        storage: BlobStorage,
    ) -> Doctor:
        timestamp = int(datetime.now(UTC).timestamp() * 1000)
        key = f"doctors/{doctor.id}/profile/{timestamp}_{file_name}"
        result = await storage.upload_bytes(key, content, mime_type or detect_mime_type(file_name))
        return await self.doctors.apply_changes(doctor, {"profile_image": result.file_uri})
