"""Doctor profile schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from ..models.enums import VerificationStatus
from .common import ORMModel, RequestModel


class DoctorUpsert(RequestModel):
    """Create-or-update keyed by email.

    On creation ``name``, ``specialization`` and ``consultation_fees`` are
    required; on update every field is optional.
    """

    email: EmailStr
    name: str | None = Field(default=None, min_length=1, max_length=200)
    specialization: str | None = Field(default=None, max_length=200)
    qualifications: list[str] | None = None
    experience: int | None = Field(default=None, ge=0, le=80)
    languages: list[str] | None = None
    gender: str | None = Field(default=None, max_length=20)
    about: str | None = None
    profile_image: str | None = Field(default=None, max_length=1000)
    consultation_fees: float | None = Field(default=None, ge=0)
    hospital_id: str | None = None
    verification_status: VerificationStatus | None = None


class DoctorSummary(ORMModel):
    id: str
    name: str
    email: str
    specialization: str


class DoctorResponse(ORMModel):
    id: str
    name: str
    email: str
    specialization: str
    qualifications: list[str]
    experience: int | None = None
    languages: list[str]
    gender: str | None = None
    about: str | None = None
    profile_image: str | None = None
    consultation_fees: float
    hospital_id: str | None = None
    verification_status: str
    average_rating: float
    total_ratings: int
    created_at: datetime
    updated_at: datetime
