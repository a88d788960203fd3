"""
Appointment Endpoints.

Exposed routes (all under /api/v1/appointment):
  POST /book            - Book a (doctor, date, time) slot for a patient
  POST /update-status   - Set booked / confirmed / cancelled / completed
  POST /update-payment  - Set unpaid / paid / failed
  POST /doctor-list     - A doctor's appointments, newest slot first
  POST /user-list       - A patient's appointments, newest slot first
"""
from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status

from ....core.responses import GenericResponse
from ....db.session import DbSession
from ....schemas.appointment import (
    AppointmentBook,
    AppointmentEnvelope,
    AppointmentList,
    AppointmentPaymentUpdate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    DoctorAppointmentsQuery,
    UserAppointmentsQuery,
)
from ....services.appointment_service import AppointmentService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/appointment")


def _get_appointment_service(db: DbSession) -> AppointmentService:
    return AppointmentService(db)


AppointmentServiceDep = Annotated[AppointmentService, Depends(_get_appointment_service)]


@router.post(
    "/book",
    response_model=GenericResponse[AppointmentEnvelope],
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
    responses={
        400: {"description": "A required booking field is missing"},
        404: {"description": "Patient or doctor not found"},
        409: {"description": "The slot is already booked"},
    },
)
async def book_appointment(
    body: AppointmentBook,
    service: AppointmentServiceDep,
) -> GenericResponse[AppointmentEnvelope]:
    appointment = await service.book(
        user_email=body.user_email,
        doctor_id=body.doctor_id,
        date=body.date,
        time=body.time,
        type=body.type,
        notes=body.notes,
    )
    return GenericResponse(
        message="Appointment booked successfully",
        data=AppointmentEnvelope(appointment=AppointmentResponse.model_validate(appointment)),
    )


@router.post(
    "/update-status",
    response_model=GenericResponse[AppointmentEnvelope],
    summary="Change appointment status",
    description="Any of the four states may be set directly; no transition rules apply.",
)
async def update_appointment_status(
    body: AppointmentStatusUpdate,
    service: AppointmentServiceDep,
) -> GenericResponse[AppointmentEnvelope]:
    appointment = await service.change_status(body.appointment_id, body.status)
    return GenericResponse(
        message="Appointment status updated",
        data=AppointmentEnvelope(appointment=AppointmentResponse.model_validate(appointment)),
    )


@router.post(
    "/update-payment",
    response_model=GenericResponse[AppointmentEnvelope],
    summary="Change payment status",
)
async def update_appointment_payment(
    body: AppointmentPaymentUpdate,
    service: AppointmentServiceDep,
) -> GenericResponse[AppointmentEnvelope]:
    appointment = await service.change_payment_status(body.appointment_id, body.payment_status)
    return GenericResponse(
        message="Payment status updated",
        data=AppointmentEnvelope(appointment=AppointmentResponse.model_validate(appointment)),
    )


@router.post(
    "/doctor-list",
    response_model=GenericResponse[AppointmentList],
    summary="List a doctor's appointments",
)
async def list_doctor_appointments(
    body: DoctorAppointmentsQuery,
    service: AppointmentServiceDep,
) -> GenericResponse[AppointmentList]:
    appointments = await service.list_for_doctor(body.doctor_id)
    return GenericResponse(
        message=f"Found {len(appointments)} appointment(s)",
        data=AppointmentList(appointments=[AppointmentResponse.model_validate(a) for a in appointments]),
    )


@router.post(
    "/user-list",
    response_model=GenericResponse[AppointmentList],
    summary="List a patient's appointments",
)
async def list_user_appointments(
    body: UserAppointmentsQuery,
    service: AppointmentServiceDep,
) -> GenericResponse[AppointmentList]:
    appointments = await service.list_for_user(body.email)
    return GenericResponse(
        message=f"Found {len(appointments)} appointment(s)",
        data=AppointmentList(appointments=[AppointmentResponse.model_validate(a) for a in appointments]),
    )
