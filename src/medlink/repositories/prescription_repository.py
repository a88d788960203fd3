"""Prescription Repository - data access for prescriptions."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import PrescriptionAlreadyExistsError
from ..models.enums import PrescriptionStatus
from ..models.prescription import Prescription

log = structlog.get_logger(__name__)

MUTABLE_FIELDS = ("notes", "follow_up_date", "medications", "status")


class PrescriptionRepository:
    """Repository for Prescription CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, prescription_id: str) -> Prescription | None:
        return await self.session.get(Prescription, prescription_id)

    async def get_by_appointment(self, appointment_id: str) -> Prescription | None:
        query = select(Prescription).where(Prescription.appointment_id == appointment_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        doctor_id: str | None = None,
        patient_id: str | None = None,
        status: str | None = None,
    ) -> Sequence[Prescription]:
        """Filtered list, newest first."""
        query = select(Prescription)
        if doctor_id:
            query = query.where(Prescription.doctor_id == doctor_id)
        if patient_id:
            query = query.where(Prescription.patient_id == patient_id)
        if status:
            query = query.where(Prescription.status == status)
        query = query.order_by(Prescription.created_at.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    async def create(
        self,
        *,
        patient_id: str,
        doctor_id: str,
        appointment_id: str,
        medications: list[dict[str, Any]],
        notes: str | None = None,
        follow_up_date: datetime | None = None,
    ) -> Prescription:
        """Insert an Active prescription.

        Raises:
            PrescriptionAlreadyExistsError: unique appointment_id violated
        """
        prescription = Prescription(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_id=appointment_id,
            medications=medications,
            notes=notes,
            follow_up_date=follow_up_date,
        )
        self.session.add(prescription)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise PrescriptionAlreadyExistsError(appointment_id) from exc
        await self.session.refresh(prescription)

        log.info(
            "prescription_created",
            prescription_id=prescription.id,
            appointment_id=appointment_id,
            medication_count=len(medications),
        )
        return prescription

    async def apply_changes(self, prescription: Prescription, changes: dict[str, Any]) -> Prescription:
        applied = [key for key in MUTABLE_FIELDS if key in changes]
        for key in applied:
            setattr(prescription, key, changes[key])
        await self.session.flush()
        await self.session.refresh(prescription)

        log.info("prescription_updated", prescription_id=prescription.id, fields=applied)
        return prescription

    async def cancel(self, prescription: Prescription) -> Prescription:
        """Soft delete."""
        prescription.status = PrescriptionStatus.CANCELLED.value
        await self.session.flush()
        log.info("prescription_cancelled", prescription_id=prescription.id)
        return prescription
