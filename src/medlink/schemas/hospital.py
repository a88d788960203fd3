"""Hospital profile schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from ..models.hospital import MAX_HOSPITAL_IMAGES
from .common import ORMModel, RequestModel


class AddressIn(RequestModel):
    street: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    coordinates: list[float] | None = Field(
        default=None,
        min_length=2,
        max_length=2,
        description="[longitude, latitude]; omitted or [0, 0] triggers geocoding",
    )


class HospitalUpsert(RequestModel):
    email: EmailStr
    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=20)
    website: str | None = Field(default=None, max_length=500)
    address: AddressIn | None = None
    images: list[str] | None = Field(default=None, max_length=MAX_HOSPITAL_IMAGES)


class RemoveDoctorRequest(RequestModel):
    doctor_id: str | None = None


class AddressOut(ORMModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    coordinates: list[float]


class HospitalResponse(ORMModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    website: str | None = None
    address: AddressOut
    images: list[str]
    average_rating: float
    total_ratings: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, hospital) -> HospitalResponse:
        return cls(
            id=hospital.id,
            name=hospital.name,
            email=hospital.email,
            phone=hospital.phone,
            website=hospital.website,
            address=AddressOut(
                street=hospital.street,
                city=hospital.city,
                state=hospital.state,
                country=hospital.country,
                postal_code=hospital.postal_code,
                coordinates=hospital.coordinates,
            ),
            images=list(hospital.images or []),
            average_rating=hospital.average_rating,
            total_ratings=hospital.total_ratings,
            created_at=hospital.created_at,
            updated_at=hospital.updated_at,
        )
