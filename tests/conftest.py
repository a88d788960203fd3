"""Pytest fixtures and configuration."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.medlink.core.config import get_settings
from src.medlink.db.session import Base, get_db
from src.medlink.main import app
from src.medlink.models.doctor import Doctor
from src.medlink.models.enums import UserRole
from src.medlink.models.hospital import Hospital
from src.medlink.models.user import User
from src.medlink.repositories.doctor_repository import DoctorRepository
from src.medlink.repositories.hospital_repository import HospitalRepository
from src.medlink.repositories.user_repository import UserRepository
from src.medlink.services.blob_storage_service import LocalBlobStorageService, get_blob_storage_service
from src.medlink.services.gemini_service import get_gemini_service
from src.medlink.services.geocoding_service import get_geocoding_service

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

# Test database URL (in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PATIENT_EMAIL = "priya.patel@example.com"
DOCTOR_EMAIL = "dr.rao@example.com"
HOSPITAL_EMAIL = "admin@cityhospital.example.com"

GEMINI_REPLY = (
    "FULL RESPONSE: Rest, drink plenty of fluids and see a doctor if the fever lasts.\n"
    "VOICE SUMMARY: Rest and stay hydrated."
)


def _base64url_encode(data: bytes) -> str:
    """Encode bytes using base64 URL-safe encoding without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _create_test_jwt(email: str, expire_minutes: int = 30) -> str:
    """Create a session token the way the external session provider signs it."""
    secret = get_settings().SECRET_KEY

    now = datetime.now(timezone.utc)
    payload = {
        "sub": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expire_minutes)).timestamp()),
    }
    header = {"alg": "HS256", "typ": "JWT"}

    encoded_header = _base64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    encoded_payload = _base64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))

    signing_input = f"{encoded_header}.{encoded_payload}".encode("ascii")
    signature = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()

    return f"{encoded_header}.{encoded_payload}.{_base64url_encode(signature)}"


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Factory: Bearer headers for a session belonging to ``email``."""

    def _headers(email: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {_create_test_jwt(email)}"}

    return _headers


@pytest.fixture
def patient_headers(auth_headers) -> dict[str, str]:
    return auth_headers(PATIENT_EMAIL)


@pytest.fixture
def doctor_headers(auth_headers) -> dict[str, str]:
    return auth_headers(DOCTOR_EMAIL)


@pytest.fixture
def hospital_headers(auth_headers) -> dict[str, str]:
    return auth_headers(HOSPITAL_EMAIL)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


def _session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with _session_factory(test_engine)() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# External collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def blob_storage(tmp_path: Path) -> LocalBlobStorageService:
    """Filesystem blob storage rooted in a per-test temp directory."""
    return LocalBlobStorageService(base_path=tmp_path / "blobs")


@pytest.fixture
def mock_gemini() -> MagicMock:
    """Gemini stand-in answering every prompt with a marked reply."""
    gemini = MagicMock()
    gemini.generate_with_retry = AsyncMock(return_value=GEMINI_REPLY)
    return gemini


@pytest.fixture
def mock_geocoder() -> MagicMock:
    """Geocoder that never finds a match unless a test says otherwise."""
    geocoder = MagicMock()
    geocoder.geocode = AsyncMock(return_value=None)
    geocoder.close = AsyncMock()
    return geocoder


@pytest_asyncio.fixture(scope="function")
async def client(
    test_engine: AsyncEngine,
    blob_storage: LocalBlobStorageService,
    mock_gemini: MagicMock,
    mock_geocoder: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with overridden dependencies."""
    factory = _session_factory(test_engine)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage_service] = lambda: blob_storage
    app.dependency_overrides[get_gemini_service] = lambda: mock_gemini
    app.dependency_overrides[get_geocoding_service] = lambda: mock_geocoder

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def patient(db_session: AsyncSession) -> User:
    user = await UserRepository(db_session).create(
        fullname="Priya Patel",
        email=PATIENT_EMAIL,
        username="priya",
        phone="+14155550101",
    )
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def doctor(db_session: AsyncSession) -> Doctor:
    """A doctor with both a base user record and a doctor profile."""
    await UserRepository(db_session).create(
        fullname="Dr. Arjun Rao",
        email=DOCTOR_EMAIL,
        username="drrao",
        role=UserRole.DOCTOR.value,
    )
    profile = await DoctorRepository(db_session).create(
        DOCTOR_EMAIL,
        {
            "name": "Arjun Rao",
            "specialization": "Cardiology",
            "consultation_fees": 500.0,
            "qualifications": ["MBBS", "MD"],
            "languages": ["English", "Hindi"],
            "experience": 12,
        },
    )
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def hospital(db_session: AsyncSession) -> Hospital:
    await UserRepository(db_session).create(
        fullname="City Hospital",
        email=HOSPITAL_EMAIL,
        username="cityhospital",
        role=UserRole.HOSPITAL.value,
    )
    row = await HospitalRepository(db_session).create(
        HOSPITAL_EMAIL,
        {
            "name": "City Hospital",
            "city": "Pune",
            "country": "India",
            "longitude": 73.8567,
            "latitude": 18.5204,
        },
    )
    await db_session.commit()
    return row


@pytest.fixture
def medications() -> list[dict]:
    return [
        {"name": "Amoxicillin", "dosage": "500mg", "frequency": "3x daily", "duration": "7 days"},
        {
            "name": "Paracetamol",
            "dosage": "650mg",
            "frequency": "as needed",
            "duration": "5 days",
            "notes": "Max 4 doses a day",
        },
    ]
