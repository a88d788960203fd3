"""API tests for /api/v1/ratings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpx import AsyncClient


async def _submit(client: AsyncClient, headers: dict, **body) -> dict:
    response = await client.post("/api/v1/ratings/submit", json=body, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


async def test_submit_updates_doctor_aggregate(client: AsyncClient, patient_headers, patient, doctor) -> None:
    data = await _submit(
        client, patient_headers, userId=patient.id, targetType="doctor", targetId=doctor.id, rating=4, review="Kind"
    )

    assert data["rating"]["rating"] == 4
    assert data["average_rating"] == 4.0
    assert data["total_ratings"] == 1

    response = await client.get(f"/api/v1/doctors/{doctor.id}", headers=patient_headers)
    assert response.json()["data"]["average_rating"] == 4.0
    assert response.json()["data"]["total_ratings"] == 1


async def test_resubmitting_overwrites(client: AsyncClient, patient_headers, patient, hospital) -> None:
    await _submit(client, patient_headers, userId=patient.id, targetType="hospital", targetId=hospital.id, rating=2)
    data = await _submit(
        client, patient_headers, userId=patient.id, targetType="hospital", targetId=hospital.id, rating=5
    )

    assert data["total_ratings"] == 1
    assert data["average_rating"] == 5.0


async def test_rating_out_of_range(client: AsyncClient, patient_headers, patient, doctor) -> None:
    response = await client.post(
        "/api/v1/ratings/submit",
        json={"userId": patient.id, "targetType": "doctor", "targetId": doctor.id, "rating": 0},
        headers=patient_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_RATING"


async def test_unknown_target(client: AsyncClient, patient_headers, patient) -> None:
    response = await client.post(
        "/api/v1/ratings/submit",
        json={"userId": patient.id, "targetType": "doctor", "targetId": "ghost", "rating": 3},
        headers=patient_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TARGET_NOT_FOUND"


async def test_unknown_rater(client: AsyncClient, patient_headers, patient, doctor) -> None:
    response = await client.post(
        "/api/v1/ratings/submit",
        json={"userId": "no-such-user", "targetType": "doctor", "targetId": doctor.id, "rating": 3},
        headers=patient_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


async def test_get_includes_user_rating(client: AsyncClient, patient_headers, patient, doctor) -> None:
    await _submit(client, patient_headers, userId=patient.id, targetType="doctor", targetId=doctor.id, rating=3)

    response = await client.get(
        "/api/v1/ratings/get",
        params={"target_type": "doctor", "target_id": doctor.id, "user_id": patient.id},
        headers=patient_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_ratings"] == 1
    assert data["average_rating"] == 3.0
    assert data["user_rating"]["rating"] == 3
    assert len(data["ratings"]) == 1


async def test_get_without_ratings(client: AsyncClient, patient_headers, doctor) -> None:
    response = await client.get(
        "/api/v1/ratings/get",
        params={"target_type": "doctor", "target_id": doctor.id},
        headers=patient_headers,
    )

    data = response.json()["data"]
    assert data == {"ratings": [], "average_rating": 0.0, "total_ratings": 0, "user_rating": None}


async def test_get_rejects_unknown_target_type(client: AsyncClient, patient_headers) -> None:
    response = await client.get(
        "/api/v1/ratings/get",
        params={"target_type": "pharmacy", "target_id": "x"},
        headers=patient_headers,
    )

    assert response.status_code == 400
