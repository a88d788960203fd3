"""
Hospital Repository.

Data access for hospital profiles, keyed by email.
"""
import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.hospital import Hospital

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "name",
    "phone",
    "website",
    "street",
    "city",
    "state",
    "country",
    "postal_code",
    "longitude",
    "latitude",
    "images",
)


class HospitalRepository:
    """Repository for Hospital entity database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, hospital_id: str) -> Hospital | None:
        return await self.session.get(Hospital, hospital_id)

    async def get_by_email(self, email: str) -> Hospital | None:
        query = select(Hospital).where(Hospital.email == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def search(self, city: str | None = None) -> Sequence[Hospital]:
        query = select(Hospital)
        if city:
            query = query.where(func.lower(Hospital.city) == city.strip().lower())
        query = query.order_by(Hospital.name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def create(self, email: str, fields: dict[str, Any]) -> Hospital:
        hospital = Hospital(
            email=email.strip().lower(),
            **{key: value for key, value in fields.items() if key in PROFILE_FIELDS},
        )
        self.session.add(hospital)
        await self.session.flush()
        await self.session.refresh(hospital)

        logger.info(f"Created hospital: {hospital.id}")
        return hospital

    async def apply_changes(self, hospital: Hospital, fields: dict[str, Any]) -> Hospital:
        for key, value in fields.items():
            if key in PROFILE_FIELDS:
                setattr(hospital, key, value)
        await self.session.flush()
        await self.session.refresh(hospital)

        logger.info(f"Updated hospital: {hospital.id}")
        return hospital

    async def set_rating_aggregate(self, hospital_id: str, average: float, total: int) -> None:
        await self.session.execute(
            update(Hospital)
            .where(Hospital.id == hospital_id)
            .values(average_rating=average, total_ratings=total)
        )
