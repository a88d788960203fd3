"""Tests for GeminiService failure handling."""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.medlink.core.config import get_settings
from src.medlink.core.exceptions import AIServiceError
from src.medlink.services.gemini_service import GeminiService


def test_retries_disabled_by_default():
    assert get_settings().GEMINI_MAX_RETRIES == 0


async def test_transient_failure_is_not_retried(monkeypatch):
    service = GeminiService()
    generate = AsyncMock(side_effect=ConnectionError("connection reset"))
    monkeypatch.setattr(service, "generate", generate)

    with pytest.raises(AIServiceError):
        await service.generate_with_retry("I have a headache")

    assert generate.await_count == 1


async def test_success_passes_through(monkeypatch):
    service = GeminiService()
    monkeypatch.setattr(service, "generate", AsyncMock(return_value="Drink water."))

    assert await service.generate_with_retry("I have a headache") == "Drink water."
