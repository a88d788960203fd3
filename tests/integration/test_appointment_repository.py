"""Integration tests for AppointmentRepository slot handling."""
from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.medlink.core.exceptions import SlotUnavailableError
from src.medlink.models.enums import AppointmentStatus, AppointmentType, PaymentStatus
from src.medlink.repositories.appointment_repository import AppointmentRepository


def _slot(doctor_id: str, user_id: str, time: str = "10:00") -> dict:
    return {
        "user_id": user_id,
        "doctor_id": doctor_id,
        "date": "2025-03-10",
        "time": time,
        "type": AppointmentType.IN_PERSON.value,
    }


class TestCreate:
    async def test_new_appointment_is_booked_and_unpaid(self, db_session: AsyncSession, patient, doctor):
        appointment = await AppointmentRepository(db_session).create(**_slot(doctor.id, patient.id))

        assert appointment.status == AppointmentStatus.BOOKED.value
        assert appointment.payment_status == PaymentStatus.UNPAID.value
        assert appointment.notification_sent is False
        assert appointment.user.email == patient.email
        assert appointment.doctor.name == "Arjun Rao"

    async def test_find_slot_holder_ignores_cancelled(self, db_session: AsyncSession, patient, doctor):
        repo = AppointmentRepository(db_session)
        appointment = await repo.create(**_slot(doctor.id, patient.id))
        assert (await repo.find_slot_holder(doctor.id, "2025-03-10", "10:00")).id == appointment.id

        await repo.set_status(appointment, AppointmentStatus.CANCELLED.value)
        assert await repo.find_slot_holder(doctor.id, "2025-03-10", "10:00") is None

    async def test_unique_index_rejects_second_active_booking(self, db_session: AsyncSession, patient, doctor):
        doctor_id, patient_id = doctor.id, patient.id
        repo = AppointmentRepository(db_session)
        await repo.create(**_slot(doctor_id, patient_id))

        with pytest.raises(SlotUnavailableError):
            await repo.create(**_slot(doctor_id, patient_id))

    async def test_cancelled_slot_can_be_rebooked(self, db_session: AsyncSession, patient, doctor):
        repo = AppointmentRepository(db_session)
        first = await repo.create(**_slot(doctor.id, patient.id))
        await repo.set_status(first, AppointmentStatus.CANCELLED.value)

        second = await repo.create(**_slot(doctor.id, patient.id))
        assert second.id != first.id
        assert second.status == AppointmentStatus.BOOKED.value


class TestLists:
    async def test_newest_slot_first(self, db_session: AsyncSession, patient, doctor):
        repo = AppointmentRepository(db_session)
        await repo.create(**_slot(doctor.id, patient.id, time="09:00"))
        await repo.create(**_slot(doctor.id, patient.id, time="11:00"))

        by_doctor = await repo.list_for_doctor(doctor.id)
        by_user = await repo.list_for_user(patient.id)
        assert [a.time for a in by_doctor] == ["11:00", "09:00"]
        assert [a.time for a in by_user] == ["11:00", "09:00"]
