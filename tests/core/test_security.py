"""Tests for session token verification."""

import base64
import hashlib
import hmac
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from src.medlink.core.config import Settings
from src.medlink.core.exceptions import UnauthorizedError
from src.medlink.core.security import _decode_jwt, require_authentication

SECRET = "test-secret-key-that-is-at-least-32-characters"


@pytest.fixture
def mock_settings():
    return Settings(SECRET_KEY=SECRET, APP_ENV="development")


def create_raw_token(payload: dict, secret: str = SECRET, alg: str = "HS256") -> str:
    def b64_encode(data: dict) -> str:
        js = json.dumps(data, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(js).rstrip(b"=").decode("ascii")

    signing_input = f"{b64_encode({'alg': alg, 'typ': 'JWT'})}.{b64_encode(payload)}".encode("ascii")
    signature = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    encoded_signature = base64.urlsafe_b64encode(signature).rstrip(b"=").decode("ascii")
    return f"{signing_input.decode('ascii')}.{encoded_signature}"


def _now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def _request(token: str | None) -> MagicMock:
    request = MagicMock()
    request.headers = {"Authorization": f"Bearer {token}"} if token is not None else {}
    return request


def test_decode_jwt_success(mock_settings):
    token = create_raw_token({"sub": "priya@example.com", "exp": _now() + 3600})
    decoded = _decode_jwt(token, settings=mock_settings)
    assert decoded["sub"] == "priya@example.com"


def test_decode_jwt_expired(mock_settings):
    token = create_raw_token({"sub": "priya@example.com", "exp": _now() - 3600})
    with pytest.raises(UnauthorizedError) as exc:
        _decode_jwt(token, settings=mock_settings)
    assert exc.value.error_code == "TOKEN_EXPIRED"


def test_decode_jwt_invalid_signature(mock_settings):
    token = create_raw_token({"sub": "priya@example.com", "exp": _now() + 3600}, secret="wrong-secret")
    with pytest.raises(UnauthorizedError) as exc:
        _decode_jwt(token, settings=mock_settings)
    assert "signature" in str(exc.value).lower()


def test_decode_jwt_rejects_other_algorithms(mock_settings):
    token = create_raw_token({"sub": "priya@example.com", "exp": _now() + 3600}, alg="none")
    with pytest.raises(UnauthorizedError) as exc:
        _decode_jwt(token, settings=mock_settings)
    assert "algorithm" in str(exc.value).lower()


def test_decode_jwt_invalid_format(mock_settings):
    with pytest.raises(UnauthorizedError):
        _decode_jwt("not-a-token", settings=mock_settings)


def test_decode_jwt_invalid_exp(mock_settings):
    token = create_raw_token({"sub": "priya@example.com", "exp": "tomorrow"})
    with pytest.raises(UnauthorizedError) as exc:
        _decode_jwt(token, settings=mock_settings)
    assert "expiration" in str(exc.value).lower()


@pytest.mark.asyncio
async def test_require_authentication_returns_lowercased_email(mock_settings):
    token = create_raw_token({"sub": "Priya@Example.com", "exp": _now() + 3600})
    email = await require_authentication(_request(token), mock_settings)
    assert email == "priya@example.com"


@pytest.mark.asyncio
async def test_require_authentication_missing_header(mock_settings):
    with pytest.raises(UnauthorizedError) as exc:
        await require_authentication(_request(None), mock_settings)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_require_authentication_rejects_non_email_subject(mock_settings):
    token = create_raw_token({"sub": "user-123", "exp": _now() + 3600})
    with pytest.raises(UnauthorizedError) as exc:
        await require_authentication(_request(token), mock_settings)
    assert exc.value.error_code == "INVALID_TOKEN"
