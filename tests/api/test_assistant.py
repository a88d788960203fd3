"""API tests for /api/v1/assistant and /api/v1/chats."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.medlink.core.exceptions import AIServiceError

if TYPE_CHECKING:
    from httpx import AsyncClient


async def test_chatbot(client: AsyncClient, patient_headers, mock_gemini) -> None:
    response = await client.post(
        "/api/v1/assistant/chatbot", json={"message": "I have had a fever for two days"}, headers=patient_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["reply"] == "Rest, drink plenty of fluids and see a doctor if the fever lasts."
    assert data["voice_summary"] == "Rest and stay hydrated."
    assert data["fallback"] is False


async def test_chatbot_fallback_is_still_200(client: AsyncClient, patient_headers, mock_gemini) -> None:
    mock_gemini.generate_with_retry.side_effect = AIServiceError(original_error="timeout")

    response = await client.post("/api/v1/assistant/chatbot", json={"message": "hello"}, headers=patient_headers)

    assert response.status_code == 200
    assert response.json()["data"]["fallback"] is True


async def test_chatbot_requires_session(client: AsyncClient) -> None:
    response = await client.post("/api/v1/assistant/chatbot", json={"message": "hello"})

    assert response.status_code == 401


async def test_symptom_checker(client: AsyncClient, patient_headers, mock_gemini) -> None:
    response = await client.post(
        "/api/v1/assistant/symptom-checker", json={"symptoms": "dry cough, mild fever"}, headers=patient_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["fallback"] is False
    assert "dry cough, mild fever" in mock_gemini.generate_with_retry.await_args.args[0]


async def test_symptom_checker_requires_symptoms(client: AsyncClient, patient_headers) -> None:
    response = await client.post("/api/v1/assistant/symptom-checker", json={}, headers=patient_headers)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Symptoms are required"


async def test_chat_lifecycle(client: AsyncClient, patient_headers, patient) -> None:
    response = await client.post("/api/v1/chats", json={}, headers=patient_headers)
    assert response.status_code == 201
    chat = response.json()["data"]
    assert chat["title"] == "New Chat"
    assert chat["messages"] == []

    response = await client.post(
        f"/api/v1/chats/{chat['id']}/messages", json={"message": "Should I keep taking antibiotics?"},
        headers=patient_headers,
    )
    assert response.status_code == 200
    exchange = response.json()["data"]
    assert exchange["user_message"]["sender"] == "user"
    assert exchange["bot_message"]["sender"] == "bot"
    assert exchange["voice_summary"] == "Rest and stay hydrated."
    assert exchange["title"] == "Should I keep taking antibioti..."

    response = await client.get(f"/api/v1/chats/{chat['id']}", headers=patient_headers)
    assert [m["sender"] for m in response.json()["data"]["messages"]] == ["user", "bot"]

    response = await client.get("/api/v1/chats", headers=patient_headers)
    assert [c["id"] for c in response.json()["data"]] == [chat["id"]]

    response = await client.delete(f"/api/v1/chats/{chat['id']}", headers=patient_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/chats/{chat['id']}", headers=patient_headers)
    assert response.status_code == 404


async def test_chats_are_scoped_to_owner(client: AsyncClient, patient_headers, doctor_headers, patient, doctor) -> None:
    response = await client.post("/api/v1/chats", json={"title": "Private"}, headers=patient_headers)
    chat_id = response.json()["data"]["id"]

    response = await client.get(f"/api/v1/chats/{chat_id}", headers=doctor_headers)

    assert response.status_code == 404
