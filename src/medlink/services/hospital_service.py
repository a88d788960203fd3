"""
Hospital Service.

Hospital profiles keyed by email. Saving geocodes the address when the
caller sends no usable coordinates; a failed lookup stores [0, 0].
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import BadRequestError, DoctorNotFoundError, HospitalNotFoundError
from ..models.doctor import Doctor
from ..models.hospital import Hospital
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.hospital_repository import HospitalRepository
from .geocoding_service import GeocodingService, build_query

log = structlog.get_logger(__name__)

ADDRESS_FIELDS = ("street", "city", "state", "country", "postal_code")


def _has_coordinates(coordinates: list[float] | None) -> bool:
    return bool(coordinates) and len(coordinates) == 2 and any(coordinates)


class HospitalService:
    def __init__(self, session: AsyncSession, geocoder: GeocodingService) -> None:
        self.hospitals = HospitalRepository(session)
        self.doctors = DoctorRepository(session)
        self.geocoder = geocoder

    async def _locate(self, address: dict[str, Any]) -> tuple[float, float]:
        coordinates = address.get("coordinates")
        if _has_coordinates(coordinates):
            return float(coordinates[0]), float(coordinates[1])

        query = build_query(address.get(field) for field in ADDRESS_FIELDS)
        point = await self.geocoder.geocode(query)
        if point is None:
            log.warning("hospital_geocode_fallback", query_present=bool(query))
            return 0.0, 0.0
        return point

    async def upsert(
        self,
        email: str,
        fields: dict[str, Any],
        address: dict[str, Any] | None = None,
    ) -> tuple[Hospital, bool]:
        """Returns (hospital, created)."""
        fields = {key: value for key, value in fields.items() if value is not None}

        if address is not None:
            fields.update({field: address.get(field) for field in ADDRESS_FIELDS if field in address})
            fields["longitude"], fields["latitude"] = await self._locate(address)

        hospital = await self.hospitals.get_by_email(email)
        if hospital:
            return await self.hospitals.apply_changes(hospital, fields), False

        if not fields.get("name"):
            raise BadRequestError(message="Hospital name is required", error_code="MISSING_REQUIRED_FIELDS")
        hospital = await self.hospitals.create(email, fields)
        log.info("hospital_created", hospital_id=hospital.id)
        return hospital, True

    async def get(self, hospital_id: str) -> Hospital:
        hospital = await self.hospitals.get_by_id(hospital_id)
        if not hospital:
            raise HospitalNotFoundError(hospital_id)
        return hospital

    async def get_by_email(self, email: str | None) -> Hospital:
        if not email:
            raise BadRequestError(message="Email is required", error_code="MISSING_REQUIRED_FIELDS")
        hospital = await self.hospitals.get_by_email(email)
        if not hospital:
            raise HospitalNotFoundError(email)
        return hospital

    async def roster(self, hospital_id: str) -> Sequence[Doctor]:
        await self.get(hospital_id)
        return await self.doctors.search(hospital_id=hospital_id)

    async def remove_doctor(self, hospital: Hospital, doctor_id: str | None) -> Doctor:
        """Detach a doctor from ``hospital``; the doctor profile is kept."""
        if not doctor_id:
            raise BadRequestError(message="Doctor ID is required", error_code="MISSING_REQUIRED_FIELDS")
        doctor = await self.doctors.get_by_id(doctor_id)
        if not doctor or doctor.hospital_id != hospital.id:
            raise DoctorNotFoundError(doctor_id, message="Doctor not found in this hospital")

        log.info("hospital_doctor_removed", hospital_id=hospital.id, doctor_id=doctor.id)
        return await self.doctors.detach_from_hospital(doctor)
