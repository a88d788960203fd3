"""Session token verification.

The portal does not issue sessions. The external session provider signs an
HS256 JWT with the shared ``SECRET_KEY`` whose ``sub`` claim is the account
email. This module verifies such tokens and exposes the email to handlers.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends, Request

from .config import Settings, get_settings
from .exceptions import UnauthorizedError


def _base64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _decode_jwt(token: str, *, settings: Settings) -> dict[str, Any]:
    """Decode and validate an HS256 JWT.

    - Header must declare HS256
    - Signature must match SECRET_KEY
    - ``exp`` must be an integer in the future
    """

    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
    except ValueError as exc:
        raise UnauthorizedError(
            message="Invalid token format",
            error_code="INVALID_TOKEN",
        ) from exc

    try:
        header = json.loads(_base64url_decode(header_b64))
        payload = json.loads(_base64url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError) as exc:
        raise UnauthorizedError(
            message="Invalid token payload",
            error_code="INVALID_TOKEN",
        ) from exc

    if not isinstance(header, dict) or header.get("alg") != settings.ALGORITHM:
        raise UnauthorizedError(
            message="Unsupported token algorithm",
            error_code="INVALID_TOKEN",
        )

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_sig = hmac.new(
        settings.SECRET_KEY.encode("utf-8"),
        signing_input,
        hashlib.sha256,
    ).digest()
    expected_sig_b64 = base64.urlsafe_b64encode(expected_sig).rstrip(b"=").decode("ascii")

    if not hmac.compare_digest(signature_b64, expected_sig_b64):
        raise UnauthorizedError(
            message="Invalid token signature",
            error_code="INVALID_TOKEN",
        )

    if not isinstance(payload, dict):
        raise UnauthorizedError(message="Invalid token payload", error_code="INVALID_TOKEN")

    exp = payload.get("exp")
    if not isinstance(exp, int):
        raise UnauthorizedError(
            message="Invalid token expiration",
            error_code="INVALID_TOKEN",
        )

    if int(datetime.now(UTC).timestamp()) >= exp:
        raise UnauthorizedError(
            message="Token has expired",
            error_code="TOKEN_EXPIRED",
        )

    return payload


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.lower().startswith("bearer "):
        raise UnauthorizedError(message="Authentication required")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise UnauthorizedError(message="Missing access token")
    return token


async def require_authentication(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """FastAPI dependency that enforces a valid Bearer token.

    Returns the session email (the ``sub`` claim, lower-cased).
    """
    payload = _decode_jwt(_bearer_token(request), settings=settings)

    subject = payload.get("sub")
    if not isinstance(subject, str) or "@" not in subject:
        raise UnauthorizedError(
            message="Invalid token subject",
            error_code="INVALID_TOKEN",
        )

    return subject.strip().lower()


SessionEmail = Annotated[str, Depends(require_authentication)]
