"""
Doctor Repository.

Data access for doctor profiles. Profiles are upserted by email and
carry denormalized rating aggregates written by the rating flow.
"""
import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.doctor import Doctor

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "name",
    "specialization",
    "qualifications",
    "experience",
    "languages",
    "gender",
    "about",
    "profile_image",
    "consultation_fees",
    "hospital_id",
    "verification_status",
)


class DoctorRepository:
    """Repository for Doctor entity database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, doctor_id: str) -> Doctor | None:
        return await self.session.get(Doctor, doctor_id)

    async def get_by_email(self, email: str) -> Doctor | None:
        query = select(Doctor).where(Doctor.email == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        hospital_id: str | None = None,
        verification_status: str | None = None,
        specialization: str | None = None,
    ) -> Sequence[Doctor]:
        """List doctors with optional filters, best rated first."""
        query = select(Doctor)
        if hospital_id:
            query = query.where(Doctor.hospital_id == hospital_id)
        if verification_status:
            query = query.where(Doctor.verification_status == verification_status)
        if specialization:
            query = query.where(Doctor.specialization.ilike(f"%{specialization}%"))
        query = query.order_by(Doctor.average_rating.desc(), Doctor.name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def create(self, email: str, fields: dict[str, Any]) -> Doctor:
        doctor = Doctor(
            email=email.strip().lower(),
            **{key: value for key, value in fields.items() if key in PROFILE_FIELDS},
        )
        self.session.add(doctor)
        await self.session.flush()
        await self.session.refresh(doctor)

        logger.info(f"Created doctor profile: {doctor.id}")
        return doctor

    async def apply_changes(self, doctor: Doctor, fields: dict[str, Any]) -> Doctor:
        for key, value in fields.items():
            if key in PROFILE_FIELDS:
                setattr(doctor, key, value)
        await self.session.flush()
        await self.session.refresh(doctor)

        logger.info(f"Updated doctor profile: {doctor.id}")
        return doctor

    async def detach_from_hospital(self, doctor: Doctor) -> Doctor:
        """Remove the doctor from its hospital roster."""
        doctor.hospital_id = None
        await self.session.flush()
        await self.session.refresh(doctor)
        return doctor

    async def set_rating_aggregate(self, doctor_id: str, average: float, total: int) -> None:
        await self.session.execute(
            update(Doctor)
            .where(Doctor.id == doctor_id)
            .values(average_rating=average, total_ratings=total)
        )
