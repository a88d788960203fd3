"""API tests for /api/v1/appointment."""

from __future__ import annotations

from typing import TYPE_CHECKING

PATIENT_EMAIL = "priya.patel@example.com"

if TYPE_CHECKING:
    from httpx import AsyncClient


def _booking(doctor_id: str, time: str = "10:00") -> dict:
    return {
        "userEmail": PATIENT_EMAIL,
        "doctorId": doctor_id,
        "date": "2025-03-10",
        "time": time,
        "type": "telemedicine",
        "notes": "Chest pain after exercise",
    }


async def _book(client: AsyncClient, headers: dict, doctor_id: str, time: str = "10:00") -> dict:
    response = await client.post("/api/v1/appointment/book", json=_booking(doctor_id, time), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["appointment"]


async def test_book_appointment(client: AsyncClient, patient_headers, patient, doctor) -> None:
    appointment = await _book(client, patient_headers, doctor.id)

    assert appointment["status"] == "booked"
    assert appointment["payment_status"] == "unpaid"
    assert appointment["type"] == "telemedicine"
    assert appointment["user"]["email"] == PATIENT_EMAIL
    assert appointment["doctor"]["name"] == "Arjun Rao"
    assert appointment["notification_sent"] is False


async def test_double_booking_is_rejected(client: AsyncClient, patient_headers, patient, doctor) -> None:
    await _book(client, patient_headers, doctor.id)

    response = await client.post(
        "/api/v1/appointment/book",
        json=_booking(doctor.id),
        headers={**patient_headers, "X-Request-ID": "book-2"},
    )

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "SLOT_UNAVAILABLE"
    assert body["meta"]["request_id"] == "book-2"


async def test_cancelled_slot_can_be_rebooked(client: AsyncClient, patient_headers, patient, doctor) -> None:
    first = await _book(client, patient_headers, doctor.id)

    response = await client.post(
        "/api/v1/appointment/update-status",
        json={"appointment_id": first["id"], "status": "cancelled"},
        headers=patient_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["appointment"]["status"] == "cancelled"

    second = await _book(client, patient_headers, doctor.id)
    assert second["id"] != first["id"]


async def test_missing_fields(client: AsyncClient, patient_headers, patient, doctor) -> None:
    response = await client.post(
        "/api/v1/appointment/book",
        json={"doctorId": doctor.id, "date": "2025-03-10"},
        headers=patient_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "All fields are required"


async def test_unknown_doctor(client: AsyncClient, patient_headers, patient) -> None:
    response = await client.post("/api/v1/appointment/book", json=_booking("no-such-doctor"), headers=patient_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "DOCTOR_NOT_FOUND"


async def test_payment_update(client: AsyncClient, patient_headers, patient, doctor) -> None:
    appointment = await _book(client, patient_headers, doctor.id)

    response = await client.post(
        "/api/v1/appointment/update-payment",
        json={"appointmentId": appointment["id"], "paymentStatus": "paid"},
        headers=patient_headers,
    )

    assert response.status_code == 200
    updated = response.json()["data"]["appointment"]
    assert updated["payment_status"] == "paid"
    assert updated["status"] == "booked"


async def test_unknown_status_value(client: AsyncClient, patient_headers, patient, doctor) -> None:
    appointment = await _book(client, patient_headers, doctor.id)

    response = await client.post(
        "/api/v1/appointment/update-status",
        json={"appointment_id": appointment["id"], "status": "rescheduled"},
        headers=patient_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_type_and_payment_values(client: AsyncClient, patient_headers, patient, doctor) -> None:
    response = await client.post(
        "/api/v1/appointment/book",
        json={**_booking(doctor.id), "type": "house-call"},
        headers=patient_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    appointment = await _book(client, patient_headers, doctor.id)
    response = await client.post(
        "/api/v1/appointment/update-payment",
        json={"appointmentId": appointment["id"], "paymentStatus": "refunded"},
        headers=patient_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_lists_newest_slot_first(client: AsyncClient, patient_headers, doctor_headers, patient, doctor) -> None:
    await _book(client, patient_headers, doctor.id, time="09:00")
    await _book(client, patient_headers, doctor.id, time="11:30")

    response = await client.post("/api/v1/appointment/user-list", json={"email": PATIENT_EMAIL}, headers=patient_headers)
    assert response.status_code == 200
    assert [a["time"] for a in response.json()["data"]["appointments"]] == ["11:30", "09:00"]

    response = await client.post("/api/v1/appointment/doctor-list", json={"doctorId": doctor.id}, headers=doctor_headers)
    assert response.status_code == 200
    assert len(response.json()["data"]["appointments"]) == 2


async def test_requires_session(client: AsyncClient, doctor) -> None:
    response = await client.post("/api/v1/appointment/book", json=_booking(doctor.id))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"
