"""API tests for /api/v1/hospitals."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpx import AsyncClient

NEW_HOSPITAL_EMAIL = "contact@lakeviewclinic.example.com"


def _hospital_body(**address) -> dict:
    return {
        "email": NEW_HOSPITAL_EMAIL,
        "name": "Lakeview Clinic",
        "phone": "+912025550199",
        "address": {"street": "12 Lake Road", "city": "Nagpur", "country": "India", **address},
    }


async def test_failed_geocode_stores_origin(client: AsyncClient, auth_headers, mock_geocoder) -> None:
    response = await client.post(
        "/api/v1/hospitals/update", json=_hospital_body(), headers=auth_headers(NEW_HOSPITAL_EMAIL)
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Hospital created"
    assert body["data"]["address"]["coordinates"] == [0.0, 0.0]
    assert body["data"]["address"]["city"] == "Nagpur"
    mock_geocoder.geocode.assert_awaited_once()
    assert "Nagpur" in mock_geocoder.geocode.await_args.args[0]


async def test_geocoded_address(client: AsyncClient, auth_headers, mock_geocoder) -> None:
    mock_geocoder.geocode.return_value = (79.0882, 21.1458)

    response = await client.post(
        "/api/v1/hospitals/update", json=_hospital_body(), headers=auth_headers(NEW_HOSPITAL_EMAIL)
    )

    assert response.json()["data"]["address"]["coordinates"] == [79.0882, 21.1458]


async def test_supplied_coordinates_skip_geocoding(client: AsyncClient, auth_headers, mock_geocoder) -> None:
    response = await client.post(
        "/api/v1/hospitals/update",
        json=_hospital_body(coordinates=[79.1, 21.2]),
        headers=auth_headers(NEW_HOSPITAL_EMAIL),
    )

    assert response.json()["data"]["address"]["coordinates"] == [79.1, 21.2]
    mock_geocoder.geocode.assert_not_awaited()


async def test_update_keeps_existing_location(client: AsyncClient, hospital_headers, hospital, mock_geocoder) -> None:
    response = await client.post(
        "/api/v1/hospitals/update",
        json={"email": hospital.email, "website": "https://cityhospital.example.com"},
        headers=hospital_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["website"] == "https://cityhospital.example.com"
    assert data["address"]["coordinates"] == [73.8567, 18.5204]
    mock_geocoder.geocode.assert_not_awaited()


async def test_update_rejects_someone_elses_email(client: AsyncClient, patient_headers, hospital) -> None:
    response = await client.post(
        "/api/v1/hospitals/update",
        json={"email": hospital.email, "name": "Hijacked"},
        headers=patient_headers,
    )

    assert response.status_code == 403


async def test_lookup_and_city_filter(client: AsyncClient, patient_headers, hospital) -> None:
    response = await client.get("/api/v1/hospitals", params={"city": "pune"}, headers=patient_headers)
    assert [h["id"] for h in response.json()["data"]] == [hospital.id]

    response = await client.get("/api/v1/hospitals", params={"city": "Mumbai"}, headers=patient_headers)
    assert response.json()["data"] == []

    response = await client.get("/api/v1/hospitals/get-info", params={"email": hospital.email}, headers=patient_headers)
    assert response.json()["data"]["name"] == "City Hospital"

    response = await client.get(f"/api/v1/hospitals/{hospital.id}", headers=patient_headers)
    assert response.status_code == 200

    response = await client.get("/api/v1/hospitals/unknown", headers=patient_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "HOSPITAL_NOT_FOUND"


async def test_roster_and_remove_doctor(
    client: AsyncClient, doctor_headers, hospital_headers, doctor, hospital
) -> None:
    response = await client.post(
        "/api/v1/doctors/update",
        json={"email": doctor.email, "hospitalId": hospital.id},
        headers=doctor_headers,
    )
    assert response.status_code == 200

    response = await client.get(f"/api/v1/hospitals/{hospital.id}/doctors", headers=hospital_headers)
    assert [d["id"] for d in response.json()["data"]] == [doctor.id]

    response = await client.post(
        "/api/v1/hospitals/remove-doctor", json={"doctorId": doctor.id}, headers=hospital_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["hospital_id"] is None

    response = await client.get(f"/api/v1/hospitals/{hospital.id}/doctors", headers=hospital_headers)
    assert response.json()["data"] == []

    # The profile itself survives.
    response = await client.get(f"/api/v1/doctors/{doctor.id}", headers=hospital_headers)
    assert response.status_code == 200


async def test_remove_doctor_not_on_roster(client: AsyncClient, hospital_headers, doctor, hospital) -> None:
    response = await client.post(
        "/api/v1/hospitals/remove-doctor", json={"doctorId": doctor.id}, headers=hospital_headers
    )

    assert response.status_code == 404


async def test_remove_doctor_requires_hospital(client: AsyncClient, patient_headers, doctor) -> None:
    response = await client.post(
        "/api/v1/hospitals/remove-doctor", json={"doctorId": doctor.id}, headers=patient_headers
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "HOSPITAL_REQUIRED"
