"""
Custom Exception Classes.

Domain errors raised by services and repositories. The global exception
handler in ``main`` converts every ``AppException`` into the standard
error envelope with the exception's status code.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "APP_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

# ============================================
# 4xx Client Errors
# ============================================

class BadRequestError(AppException):
    """Missing or malformed input (400)."""

    def __init__(
        self,
        message: str = "Invalid request",
        error_code: str = "BAD_REQUEST",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, 400, details)

class UnauthorizedError(AppException):
    """No valid session (401)."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: str = "UNAUTHORIZED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, 401, details)

class ForbiddenError(AppException):
    """Session present but the actor may not touch this resource (403)."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, 403, details)

class NotFoundError(AppException):
    """Referenced entity does not exist (404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: str = "NOT_FOUND",
        resource_type: str | None = None,
        resource_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, error_code, 404, details)

class ConflictError(AppException):
    """Uniqueness rule violated (409)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, 409, details)

class ValidationError(AppException):
    """Data validation failed (400, same status as request-body validation)."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        errors: list[dict[str, Any]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if errors:
            details["validation_errors"] = errors
        super().__init__(message, error_code, 400, details)

# ============================================
# 5xx Server Errors
# ============================================

class InternalServerError(AppException):
    """Internal server error (500)."""

    def __init__(
        self,
        message: str = "Internal server error",
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, 500, details)

class ServiceUnavailableError(AppException):
    """Service temporarily unavailable (503)."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        error_code: str = "SERVICE_UNAVAILABLE",
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if retry_after:
            details["retry_after_seconds"] = retry_after
        super().__init__(message, error_code, 503, details)

class ExternalServiceError(AppException):
    """Upstream collaborator failed (502)."""

    def __init__(
        self,
        service_name: str,
        message: str | None = None,
        error_code: str = "EXTERNAL_SERVICE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["service"] = service_name
        super().__init__(
            message or f"External service '{service_name}' is unavailable or returned an error",
            error_code,
            502,
            details,
        )

# ============================================
# Domain-Specific Exceptions
# ============================================

class UserNotFoundError(NotFoundError):
    def __init__(self, identifier: str | None = None, message: str = "User not found") -> None:
        super().__init__(
            message=message,
            error_code="USER_NOT_FOUND",
            resource_type="user",
            resource_id=identifier,
        )

class DoctorNotFoundError(NotFoundError):
    def __init__(self, identifier: str | None = None, message: str = "Doctor not found") -> None:
        super().__init__(
            message=message,
            error_code="DOCTOR_NOT_FOUND",
            resource_type="doctor",
            resource_id=identifier,
        )

class HospitalNotFoundError(NotFoundError):
    def __init__(self, identifier: str | None = None, message: str = "Hospital not found") -> None:
        super().__init__(
            message=message,
            error_code="HOSPITAL_NOT_FOUND",
            resource_type="hospital",
            resource_id=identifier,
        )

class AppointmentNotFoundError(NotFoundError):
    def __init__(self, appointment_id: str | None = None) -> None:
        super().__init__(
            message="Appointment not found",
            error_code="APPOINTMENT_NOT_FOUND",
            resource_type="appointment",
            resource_id=appointment_id,
        )

class PrescriptionNotFoundError(NotFoundError):
    def __init__(self, prescription_id: str | None = None) -> None:
        super().__init__(
            message="Prescription not found",
            error_code="PRESCRIPTION_NOT_FOUND",
            resource_type="prescription",
            resource_id=prescription_id,
        )

class StoredFileNotFoundError(NotFoundError):
    def __init__(self, identifier: str | None = None) -> None:
        super().__init__(
            message="File not found",
            error_code="FILE_NOT_FOUND",
            resource_type="file",
            resource_id=identifier,
        )

class AlreadyExistsError(ConflictError):
    """Unique email/username taken by another record."""

    def __init__(self, entity: str, field: str, value: str) -> None:
        super().__init__(
            message=f"{entity} with {field} '{value}' already exists",
            error_code=f"{entity.upper()}_ALREADY_EXISTS",
            details={field: value},
        )

class SlotUnavailableError(ConflictError):
    """A non-cancelled appointment already holds (doctor, date, time)."""

    def __init__(self, doctor_id: str, date: str, time: str) -> None:
        super().__init__(
            message="This time slot is already booked.",
            error_code="SLOT_UNAVAILABLE",
            details={"doctor_id": doctor_id, "date": date, "time": time},
        )

class PrescriptionAlreadyExistsError(ConflictError):
    def __init__(self, appointment_id: str) -> None:
        super().__init__(
            message="Prescription already exists for this appointment",
            error_code="PRESCRIPTION_EXISTS",
            details={"appointment_id": appointment_id},
        )

class MissingMedicationFieldsError(BadRequestError):
    def __init__(self, index: int | None = None) -> None:
        super().__init__(
            message="All medication fields are required",
            error_code="MISSING_MEDICATION_FIELDS",
            details={"medication_index": index} if index is not None else None,
        )

class FileValidationError(BadRequestError):
    """File upload validation failed."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        super().__init__(
            message=message,
            error_code="FILE_VALIDATION_ERROR",
            details={"filename": filename} if filename else None,
        )

class AIServiceError(ServiceUnavailableError):
    """Gemini call failed after retries."""

    def __init__(
        self,
        message: str = "AI service temporarily unavailable",
        original_error: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if original_error:
            details["original_error"] = original_error
        super().__init__(
            message=message,
            error_code="AI_SERVICE_ERROR",
            retry_after=60,
            details=details,
        )

class StorageError(ExternalServiceError):
    """Blob storage read/write failed."""

    def __init__(self, message: str = "File storage operation failed", key: str | None = None) -> None:
        super().__init__(
            service_name="blob_storage",
            message=message,
            error_code="STORAGE_ERROR",
            details={"key": key} if key else None,
        )
