"""Prescription schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..models.enums import PrescriptionStatus
from .common import ORMModel, RequestModel
from .doctor import DoctorSummary
from .user import UserSummary


class MedicationIn(RequestModel):
    """Completeness of the four core fields is checked by the service."""

    name: str | None = None
    dosage: str | None = None
    frequency: str | None = None
    duration: str | None = None
    notes: str | None = None


class PrescriptionCreate(RequestModel):
    patient_id: str | None = None
    appointment_id: str | None = None
    medications: list[MedicationIn] | None = None
    notes: str | None = Field(default=None, max_length=5000)
    follow_up_date: datetime | None = None


class PrescriptionUpdate(RequestModel):
    notes: str | None = Field(default=None, max_length=5000)
    follow_up_date: datetime | None = None
    medications: list[MedicationIn] | None = None
    status: PrescriptionStatus | None = None


class Medication(BaseModel):
    name: str
    dosage: str
    frequency: str
    duration: str
    notes: str | None = None


class PrescriptionResponse(ORMModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_id: str
    status: str
    notes: str | None = None
    follow_up_date: datetime | None = None
    medications: list[Medication]
    patient: UserSummary | None = None
    doctor: DoctorSummary | None = None
    created_at: datetime
    updated_at: datetime


class PrescriptionEnvelope(ORMModel):
    prescription: PrescriptionResponse


class PrescriptionList(ORMModel):
    prescriptions: list[PrescriptionResponse]


class PrescriptionCheck(ORMModel):
    exists: bool
    prescription: PrescriptionResponse | None = None


class PrescriptionShare(BaseModel):
    url: str
    key: str
    expires_in: int


def medications_payload(items: list[MedicationIn] | None) -> list[dict[str, Any]] | None:
    if items is None:
        return None
    return [item.model_dump() for item in items]
