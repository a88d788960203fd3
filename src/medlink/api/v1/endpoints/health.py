"""
Health Check Endpoints.

Liveness, readiness and a dependency report for orchestration systems.
"""
import time
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ....core.config import Settings, get_settings
from ....core.responses import HealthCheck, HealthResponse
from ....db.session import DbSession

logger = structlog.get_logger(__name__)

router = APIRouter()


def _overall(checks: dict[str, HealthCheck]) -> str:
    if any(c.status == "unhealthy" for c in checks.values()):
        return "unhealthy"
    if any(c.status == "degraded" for c in checks.values()):
        return "degraded"
    return "healthy"


def _configured(name: str, value: str, missing: str) -> HealthCheck:
    if value:
        return HealthCheck(status="healthy", message=f"{name} configured")
    return HealthCheck(status="degraded", message=missing)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Database connectivity plus configuration of Gemini, Mapbox and blob storage.",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
    db: DbSession,
) -> HealthResponse:
    checks: dict[str, HealthCheck] = {}

    db_start = time.time()
    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = HealthCheck(
            status="healthy",
            latency_ms=round((time.time() - db_start) * 1000, 2),
            message="Connected",
        )
    except SQLAlchemyError as e:
        logger.error("health_database_unreachable", error=str(e))
        checks["database"] = HealthCheck(status="unhealthy", message="Database unreachable")

    checks["ai_service"] = _configured("API key", settings.GOOGLE_API_KEY, "API key not configured")
    checks["geocoding"] = _configured(
        "Mapbox token",
        settings.MAPBOX_ACCESS_TOKEN,
        "Mapbox token not configured; hospitals fall back to [0, 0]",
    )
    checks["storage"] = HealthCheck(status="healthy", message=f"Backend: {settings.STORAGE_BACKEND}")

    return HealthResponse(
        status=_overall(checks),
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.APP_ENV,
        checks=checks,
    )


@router.get(
    "/ready",
    summary="Readiness probe",
    description="Returns 200 once the database answers.",
)
async def readiness_probe(db: DbSession) -> dict[str, str]:
    await db.execute(text("SELECT 1"))
    return {"status": "ready"}


@router.get(
    "/live",
    summary="Liveness probe",
    description="Returns 200 if the service is alive.",
)
async def liveness_probe() -> dict[str, str]:
    return {"status": "alive"}
