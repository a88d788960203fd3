"""Appointment Repository - slot-aware data access for appointments."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import SlotUnavailableError
from ..models.appointment import ACTIVE_SLOT_INDEX, Appointment
from ..models.enums import AppointmentStatus

log = structlog.get_logger(__name__)


class AppointmentRepository:
    """Repository for Appointment CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_id(self, appointment_id: str) -> Appointment | None:
        return await self.session.get(Appointment, appointment_id)

    async def find_slot_holder(self, doctor_id: str, date: str, time: str) -> Appointment | None:
        """Return the non-cancelled appointment occupying the slot, if any."""
        query = select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.date == date,
            Appointment.time == time,
            Appointment.status != AppointmentStatus.CANCELLED.value,
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def list_for_doctor(self, doctor_id: str) -> Sequence[Appointment]:
        query = (
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .order_by(Appointment.date.desc(), Appointment.time.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def list_for_user(self, user_id: str) -> Sequence[Appointment]:
        query = (
            select(Appointment)
            .where(Appointment.user_id == user_id)
            .order_by(Appointment.date.desc(), Appointment.time.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(
        self,
        *,
        user_id: str,
        doctor_id: str,
        date: str,
        time: str,
        type: str,
        notes: str | None = None,
    ) -> Appointment:
        """Insert a booked, unpaid appointment.

        Raises:
            SlotUnavailableError: the partial unique index rejected the row
                because another booking for the slot committed first.
        """
        appointment = Appointment(
            user_id=user_id,
            doctor_id=doctor_id,
            date=date,
            time=time,
            type=type,
            notes=notes,
        )
        self.session.add(appointment)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            if ACTIVE_SLOT_INDEX in str(exc.orig) or "appointments.doctor_id" in str(exc.orig):
                log.warning("appointment_slot_race_lost", doctor_id=doctor_id, date=date, time=time)
                raise SlotUnavailableError(doctor_id, date, time) from exc
            raise
        await self.session.refresh(appointment)

        log.info(
            "appointment_booked",
            appointment_id=appointment.id,
            doctor_id=doctor_id,
            date=date,
            time=time,
        )
        return appointment

    async def set_status(self, appointment: Appointment, status: str) -> Appointment:
        """Write the new status. Re-activating a cancelled booking can collide with the slot index."""
        previous = appointment.status
        appointment.status = status
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise SlotUnavailableError(appointment.doctor_id, appointment.date, appointment.time) from exc
        await self.session.refresh(appointment)

        log.info(
            "appointment_status_changed",
            appointment_id=appointment.id,
            old_status=previous,
            new_status=status,
        )
        return appointment

    async def set_payment_status(self, appointment: Appointment, payment_status: str) -> Appointment:
        appointment.payment_status = payment_status
        await self.session.flush()
        await self.session.refresh(appointment)

        log.info(
            "appointment_payment_changed",
            appointment_id=appointment.id,
            payment_status=payment_status,
        )
        return appointment
