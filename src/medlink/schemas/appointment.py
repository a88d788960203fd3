"""Appointment schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from ..models.enums import AppointmentStatus, AppointmentType, PaymentStatus
from .common import ORMModel, RequestModel
from .doctor import DoctorSummary
from .user import UserSummary


class AppointmentBook(RequestModel):
    """Missing fields are reported as 400 by the service."""

    user_email: str | None = None
    doctor_id: str | None = None
    date: str | None = Field(default=None, description="YYYY-MM-DD")
    time: str | None = Field(default=None, description="Slot label, e.g. 10:00")
    type: AppointmentType | None = AppointmentType.IN_PERSON
    notes: str | None = Field(default=None, max_length=2000)


class AppointmentStatusUpdate(RequestModel):
    appointment_id: str | None = None
    status: AppointmentStatus | None = None


class AppointmentPaymentUpdate(RequestModel):
    appointment_id: str | None = None
    payment_status: PaymentStatus | None = None


class DoctorAppointmentsQuery(RequestModel):
    doctor_id: str | None = None


class UserAppointmentsQuery(RequestModel):
    email: str | None = None


class AppointmentResponse(ORMModel):
    id: str
    user: UserSummary
    doctor: DoctorSummary
    date: str
    time: str
    status: str
    type: str
    payment_status: str
    notes: str | None = None
    notification_sent: bool
    created_at: datetime
    updated_at: datetime


class AppointmentEnvelope(ORMModel):
    appointment: AppointmentResponse


class AppointmentList(ORMModel):
    appointments: list[AppointmentResponse]
