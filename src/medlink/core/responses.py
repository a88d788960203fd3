"""
Standardized API Response Schemas.

Every endpoint answers with ``GenericResponse[T]`` on success and every
handled failure is rendered as ``ErrorResponse``.
"""
from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ResponseMeta(BaseModel):
    """Metadata included in all API responses."""

    request_id: str | None = Field(
        default=None,
        description="Unique request identifier for tracing"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Response timestamp (UTC)"
    )
    version: str = Field(default="v1", description="API version")


class GenericResponse(BaseModel, Generic[T]):
    """
    Wrapper for successful API responses.

    Example:
        ```python
        @router.get("/{prescription_id}", response_model=GenericResponse[PrescriptionResponse])
        async def get_prescription(...) -> GenericResponse[PrescriptionResponse]:
            return GenericResponse(message="Prescription retrieved", data=prescription)
        ```
    """

    success: bool = Field(default=True)
    message: str = Field(description="Human-readable response message")
    data: T = Field(description="Response payload")
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class ErrorDetail(BaseModel):
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: dict | None = Field(default=None, description="Additional error context")


class ErrorResponse(BaseModel):
    """Error envelope produced by the global exception handlers."""

    success: bool = Field(default=False)
    error: ErrorDetail
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class HealthCheck(BaseModel):
    """Individual health check result."""

    status: str = Field(description="Component status: healthy/unhealthy/degraded")
    latency_ms: float | None = Field(default=None)
    message: str | None = Field(default=None)


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status")
    service: str
    version: str
    environment: str
    checks: dict[str, HealthCheck] = Field(default_factory=dict)
