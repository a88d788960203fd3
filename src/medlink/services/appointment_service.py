"""
Appointment Service.

Booking and status transitions. Booking resolves the patient by email and
the doctor by id, checks the slot, then inserts. The partial unique index
on the appointments table closes the race between the check and the insert.
"""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    AppointmentNotFoundError,
    BadRequestError,
    DoctorNotFoundError,
    SlotUnavailableError,
    UserNotFoundError,
)
from ..core.invariants import holds_slot
from ..models.appointment import Appointment
from ..models.enums import AppointmentStatus, AppointmentType, PaymentStatus
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.user_repository import UserRepository

log = structlog.get_logger(__name__)


class AppointmentService:
    def __init__(self, session: AsyncSession) -> None:
        self.appointments = AppointmentRepository(session)
        self.doctors = DoctorRepository(session)
        self.users = UserRepository(session)

    async def book(
        self,
        *,
        user_email: str | None,
        doctor_id: str | None,
        date: str | None,
        time: str | None,
        type: AppointmentType | str | None,
        notes: str | None = None,
    ) -> Appointment:
        """
        Book a slot for a patient.

        Raises:
            BadRequestError: any of email, doctor, date, time or type missing
            UserNotFoundError / DoctorNotFoundError: unknown patient or doctor
            SlotUnavailableError: a non-cancelled appointment holds the slot
        """
        if not all((user_email, doctor_id, date, time, type)):
            raise BadRequestError(message="All fields are required", error_code="MISSING_REQUIRED_FIELDS")

        user = await self.users.get_by_email(user_email)
        if not user:
            raise UserNotFoundError(user_email)
        doctor = await self.doctors.get_by_id(doctor_id)
        if not doctor:
            raise DoctorNotFoundError(doctor_id)

        if await self.appointments.find_slot_holder(doctor.id, date, time):
            log.info("appointment_slot_taken", doctor_id=doctor.id, date=date, time=time)
            raise SlotUnavailableError(doctor.id, date, time)

        return await self.appointments.create(
            user_id=user.id,
            doctor_id=doctor.id,
            date=date,
            time=time,
            type=AppointmentType(type).value,
            notes=notes,
        )

    async def _require(self, appointment_id: str | None) -> Appointment:
        if not appointment_id:
            raise BadRequestError(message="Appointment ID is required", error_code="MISSING_REQUIRED_FIELDS")
        appointment = await self.appointments.get_by_id(appointment_id)
        if not appointment:
            raise AppointmentNotFoundError(appointment_id)
        return appointment

    async def change_status(
        self,
        appointment_id: str | None,
        status: AppointmentStatus | str | None,
    ) -> Appointment:
        """
        Set any of the four states directly; no transition graph.

        Reviving a cancelled appointment re-claims its slot, so it fails
        with SlotUnavailableError if someone else booked it meanwhile.
        """
        if not status:
            raise BadRequestError(message="Status is required", error_code="MISSING_REQUIRED_FIELDS")
        appointment = await self._require(appointment_id)
        new_status = AppointmentStatus(status).value

        if not holds_slot(appointment.status) and holds_slot(new_status):
            holder = await self.appointments.find_slot_holder(
                appointment.doctor_id, appointment.date, appointment.time
            )
            if holder and holder.id != appointment.id:
                raise SlotUnavailableError(appointment.doctor_id, appointment.date, appointment.time)

        return await self.appointments.set_status(appointment, new_status)

    async def change_payment_status(
        self,
        appointment_id: str | None,
        payment_status: PaymentStatus | str | None,
    ) -> Appointment:
        """Independent of the appointment status."""
        if not payment_status:
            raise BadRequestError(message="Payment status is required", error_code="MISSING_REQUIRED_FIELDS")
        appointment = await self._require(appointment_id)
        return await self.appointments.set_payment_status(appointment, PaymentStatus(payment_status).value)

    async def list_for_doctor(self, doctor_id: str | None) -> Sequence[Appointment]:
        if not doctor_id:
            raise BadRequestError(message="Doctor ID is required", error_code="MISSING_REQUIRED_FIELDS")
        return await self.appointments.list_for_doctor(doctor_id)

    async def list_for_user(self, email: str | None) -> Sequence[Appointment]:
        if not email:
            raise BadRequestError(message="Email is required", error_code="MISSING_REQUIRED_FIELDS")
        user = await self.users.get_by_email(email)
        if not user:
            raise UserNotFoundError(email)
        return await self.appointments.list_for_user(user.id)
