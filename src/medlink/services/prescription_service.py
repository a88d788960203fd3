"""
Prescription Service.

Doctors author prescriptions against an appointment; patients read their
own. Cancelling is a soft delete through the ``Cancelled`` status. The
appointment's own status is not consulted when prescribing.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_settings
from ..core.exceptions import (
    BadRequestError,
    ForbiddenError,
    PrescriptionAlreadyExistsError,
    PrescriptionNotFoundError,
    UserNotFoundError,
)
from ..core.invariants import validate_medications
from ..core.rbac import Actor
from ..models.doctor import Doctor
from ..models.enums import PrescriptionStatus
from ..models.prescription import Prescription
from ..repositories.prescription_repository import PrescriptionRepository
from ..repositories.user_repository import UserRepository
from .blob_storage_service import BlobStorage
from .prescription_pdf_service import render_prescription_pdf

log = structlog.get_logger(__name__)

MISSING_FIELDS_MESSAGE = "Patient ID, Appointment ID, and medications are required"


class PrescriptionService:
    def __init__(self, session: AsyncSession) -> None:
        self.prescriptions = PrescriptionRepository(session)
        self.users = UserRepository(session)

    async def create(
        self,
        doctor: Doctor,
        *,
        patient_id: str | None,
        appointment_id: str | None,
        medications: list[dict[str, Any]] | None,
        notes: str | None = None,
        follow_up_date: datetime | None = None,
    ) -> Prescription:
        """
        Write an Active prescription for ``appointment_id``.

        Raises:
            BadRequestError: patient, appointment or medications missing
            UserNotFoundError: patient does not exist
            PrescriptionAlreadyExistsError: appointment already prescribed
            MissingMedicationFieldsError: an entry lacks a core field
        """
        if not patient_id or not appointment_id or not medications:
            raise BadRequestError(message=MISSING_FIELDS_MESSAGE, error_code="MISSING_REQUIRED_FIELDS")

        if not await self.users.get_by_id(patient_id):
            raise UserNotFoundError(patient_id, message="Patient not found")

        if await self.prescriptions.get_by_appointment(appointment_id):
            raise PrescriptionAlreadyExistsError(appointment_id)

        cleaned = validate_medications(medications)
        return await self.prescriptions.create(
            patient_id=patient_id,
            doctor_id=doctor.id,
            appointment_id=appointment_id,
            medications=cleaned,
            notes=notes,
            follow_up_date=follow_up_date,
        )

    async def _require(self, prescription_id: str) -> Prescription:
        prescription = await self.prescriptions.get_by_id(prescription_id)
        if not prescription:
            raise PrescriptionNotFoundError(prescription_id)
        return prescription

    async def _require_author(self, prescription_id: str, doctor: Doctor) -> Prescription:
        prescription = await self._require(prescription_id)
        if prescription.doctor_id != doctor.id:
            log.warning("prescription_access_denied", prescription_id=prescription_id, doctor_id=doctor.id)
            raise ForbiddenError()
        return prescription

    async def get(self, prescription_id: str, actor: Actor) -> Prescription:
        """Readable by the authoring doctor and the patient it was written for."""
        prescription = await self._require(prescription_id)
        if actor.doctor and prescription.doctor_id == actor.doctor.id:
            return prescription
        if actor.user and prescription.patient_id == actor.user.id:
            return prescription
        raise ForbiddenError()

    async def list_for(
        self,
        actor: Actor,
        *,
        patient_id: str | None = None,
        status: str | None = None,
    ) -> Sequence[Prescription]:
        """A doctor sees what they authored; anyone else sees their own."""
        if actor.is_doctor:
            return await self.prescriptions.search(
                doctor_id=actor.doctor.id,
                patient_id=patient_id,
                status=status,
            )
        return await self.prescriptions.search(patient_id=actor.user.id, status=status)

    async def check(self, appointment_id: str | None) -> Prescription | None:
        if not appointment_id:
            raise BadRequestError(message="Appointment ID is required", error_code="MISSING_REQUIRED_FIELDS")
        return await self.prescriptions.get_by_appointment(appointment_id)

    async def update(self, prescription_id: str, doctor: Doctor, changes: dict[str, Any]) -> Prescription:
        """Partial update by the author; medications are re-validated as a whole."""
        prescription = await self._require_author(prescription_id, doctor)

        if "medications" in changes:
            changes["medications"] = validate_medications(changes["medications"])
        if changes.get("status") is not None:
            changes["status"] = PrescriptionStatus(changes["status"]).value
        elif "status" in changes:
            changes.pop("status")

        return await self.prescriptions.apply_changes(prescription, changes)

    async def cancel(self, prescription_id: str, doctor: Doctor) -> Prescription:
        prescription = await self._require_author(prescription_id, doctor)
        return await self.prescriptions.cancel(prescription)

    async def share(
        self,
        prescription_id: str,
        actor: Actor,
        storage: BlobStorage,
    ) -> tuple[str, str, int]:
        """
        Export the prescription as a PDF and return a short-lived link.

        Returns:
            (url, key, expires_in)
        """
        prescription = await self.get(prescription_id, actor)
        content = render_prescription_pdf(prescription)

        timestamp = int(datetime.now(UTC).timestamp() * 1000)
        key = f"prescriptions/{prescription.id}-{timestamp}.pdf"
        await storage.upload_bytes(key, content, "application/pdf")

        expires_in = get_settings().SHARE_LINK_EXPIRY_SECONDS
        url = await storage.share_url(key, expires_in)

        log.info("prescription_shared", prescription_id=prescription.id, key=key)
        return url, key, expires_in
