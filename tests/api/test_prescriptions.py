"""API tests for /api/v1/prescriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from httpx import AsyncClient


@pytest.fixture
def prescription_body(patient, medications) -> dict:
    return {
        "patientId": patient.id,
        "appointmentId": "appt-1001",
        "medications": medications,
        "notes": "Review in a week",
    }


async def _create(client: AsyncClient, headers: dict, body: dict) -> dict:
    response = await client.post("/api/v1/prescriptions", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["prescription"]


async def test_doctor_creates_prescription(client: AsyncClient, doctor_headers, doctor, prescription_body) -> None:
    prescription = await _create(client, doctor_headers, prescription_body)

    assert prescription["status"] == "Active"
    assert prescription["doctor_id"] == doctor.id
    assert prescription["patient"]["fullname"] == "Priya Patel"
    assert prescription["doctor"]["specialization"] == "Cardiology"
    assert prescription["medications"][1]["notes"] == "Max 4 doses a day"


async def test_one_prescription_per_appointment(
    client: AsyncClient, doctor_headers, doctor, prescription_body
) -> None:
    await _create(client, doctor_headers, prescription_body)

    response = await client.post("/api/v1/prescriptions", json=prescription_body, headers=doctor_headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "PRESCRIPTION_EXISTS"


async def test_patient_cannot_author(client: AsyncClient, patient_headers, doctor, prescription_body) -> None:
    response = await client.post("/api/v1/prescriptions", json=prescription_body, headers=patient_headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "DOCTOR_REQUIRED"


async def test_incomplete_medication(client: AsyncClient, doctor_headers, doctor, prescription_body) -> None:
    prescription_body["medications"] = [{"name": "Amoxicillin", "dosage": "500mg"}]

    response = await client.post("/api/v1/prescriptions", json=prescription_body, headers=doctor_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_MEDICATION_FIELDS"


@pytest.mark.parametrize("appointment_status", ["completed", "booked", "cancelled"])
async def test_prescription_for_booked_appointment_in_any_status(
    client: AsyncClient,
    patient_headers,
    doctor_headers,
    patient,
    doctor,
    medications,
    appointment_status,
) -> None:
    response = await client.post(
        "/api/v1/appointment/book",
        json={
            "userEmail": patient.email,
            "doctorId": doctor.id,
            "date": "2025-04-02",
            "time": "11:30",
            "type": "in-person",
        },
        headers=patient_headers,
    )
    assert response.status_code == 201, response.text
    appointment_id = response.json()["data"]["appointment"]["id"]

    response = await client.post(
        "/api/v1/appointment/update-status",
        json={"appointmentId": appointment_id, "status": appointment_status},
        headers=doctor_headers,
    )
    assert response.status_code == 200

    prescription = await _create(
        client,
        doctor_headers,
        {"patientId": patient.id, "appointmentId": appointment_id, "medications": medications},
    )
    assert prescription["appointment_id"] == appointment_id

    response = await client.get(
        "/api/v1/prescriptions/check", params={"appointment_id": appointment_id}, headers=doctor_headers
    )
    assert response.json()["data"]["exists"] is True


async def test_patient_reads_own_prescription(
    client: AsyncClient, doctor_headers, patient_headers, doctor, prescription_body
) -> None:
    created = await _create(client, doctor_headers, prescription_body)

    response = await client.get(f"/api/v1/prescriptions/{created['id']}", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["data"]["prescription"]["id"] == created["id"]

    response = await client.get("/api/v1/prescriptions", headers=patient_headers)
    assert [p["id"] for p in response.json()["data"]["prescriptions"]] == [created["id"]]


async def test_other_doctor_is_forbidden(
    client: AsyncClient, doctor_headers, auth_headers, doctor, prescription_body
) -> None:
    created = await _create(client, doctor_headers, prescription_body)
    other_headers = auth_headers("dr.mehta@example.com")
    response = await client.post(
        "/api/v1/doctors/update",
        json={
            "email": "dr.mehta@example.com",
            "name": "Kavya Mehta",
            "specialization": "Dermatology",
            "consultationFees": 400,
        },
        headers=other_headers,
    )
    assert response.status_code == 200, response.text

    response = await client.put(
        f"/api/v1/prescriptions/{created['id']}",
        json={"notes": "Changed"},
        headers=other_headers,
    )
    assert response.status_code == 403

    response = await client.get(f"/api/v1/prescriptions/{created['id']}", headers=other_headers)
    assert response.status_code == 403


async def test_update_and_soft_cancel(client: AsyncClient, doctor_headers, doctor, prescription_body) -> None:
    created = await _create(client, doctor_headers, prescription_body)

    response = await client.put(
        f"/api/v1/prescriptions/{created['id']}",
        json={"notes": "Continue for another week", "status": "Completed"},
        headers=doctor_headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]["prescription"]
    assert updated["notes"] == "Continue for another week"
    assert len(updated["medications"]) == 2

    response = await client.delete(f"/api/v1/prescriptions/{created['id']}", headers=doctor_headers)
    assert response.status_code == 200

    response = await client.get(
        "/api/v1/prescriptions/check", params={"appointment_id": "appt-1001"}, headers=doctor_headers
    )
    data = response.json()["data"]
    assert data["exists"] is True
    assert data["prescription"]["status"] == "Cancelled"


async def test_check_without_prescription(client: AsyncClient, doctor_headers, doctor) -> None:
    response = await client.get(
        "/api/v1/prescriptions/check", params={"appointment_id": "appt-none"}, headers=doctor_headers
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"exists": False, "prescription": None}


async def test_list_filters_by_status(client: AsyncClient, doctor_headers, doctor, prescription_body) -> None:
    first = await _create(client, doctor_headers, prescription_body)
    await _create(client, doctor_headers, {**prescription_body, "appointmentId": "appt-1002"})
    await client.delete(f"/api/v1/prescriptions/{first['id']}", headers=doctor_headers)

    response = await client.get("/api/v1/prescriptions", params={"status": "Active"}, headers=doctor_headers)

    prescriptions = response.json()["data"]["prescriptions"]
    assert [p["appointment_id"] for p in prescriptions] == ["appt-1002"]


async def test_share_returns_downloadable_pdf(
    client: AsyncClient, doctor_headers, patient_headers, doctor, prescription_body
) -> None:
    created = await _create(client, doctor_headers, prescription_body)

    response = await client.post(f"/api/v1/prescriptions/{created['id']}/share", headers=patient_headers)
    assert response.status_code == 200
    share = response.json()["data"]
    assert share["expires_in"] == 300

    download = await client.get(share["url"])
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert download.content.startswith(b"%PDF")
