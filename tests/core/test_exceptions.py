"""Tests for custom exceptions in core.exceptions."""

from src.medlink.core.exceptions import (
    AIServiceError,
    AlreadyExistsError,
    AppException,
    AppointmentNotFoundError,
    BadRequestError,
    ConflictError,
    ExternalServiceError,
    FileValidationError,
    ForbiddenError,
    InternalServerError,
    MissingMedicationFieldsError,
    NotFoundError,
    PrescriptionAlreadyExistsError,
    ServiceUnavailableError,
    SlotUnavailableError,
    StorageError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)


def test_app_exception_to_dict():
    exc = AppException("Test message", "TEST_CODE", 400, {"key": "value"})
    data = exc.to_dict()
    assert data["error"]["code"] == "TEST_CODE"
    assert data["error"]["message"] == "Test message"
    assert data["error"]["details"]["key"] == "value"
    assert exc.status_code == 400


def test_http_error_instantiation():
    assert BadRequestError().status_code == 400
    assert UnauthorizedError().status_code == 401
    assert ForbiddenError().status_code == 403

    not_found = NotFoundError(resource_type="doctor", resource_id="d-1")
    assert not_found.status_code == 404
    assert not_found.details == {"resource_type": "doctor", "resource_id": "d-1"}

    assert ConflictError().status_code == 409

    validation = ValidationError(errors=[{"msg": "bad"}])
    assert validation.status_code == 400
    assert "validation_errors" in validation.details

    assert InternalServerError().status_code == 500
    assert ServiceUnavailableError(retry_after=120).details["retry_after_seconds"] == 120


def test_conflict_errors_carry_their_codes():
    slot = SlotUnavailableError("d-1", "2025-03-10", "10:00")
    assert slot.status_code == 409
    assert slot.error_code == "SLOT_UNAVAILABLE"
    assert slot.details == {"doctor_id": "d-1", "date": "2025-03-10", "time": "10:00"}

    duplicate = PrescriptionAlreadyExistsError("appt-1")
    assert duplicate.status_code == 409
    assert duplicate.error_code == "PRESCRIPTION_EXISTS"

    taken = AlreadyExistsError("User", "email", "priya@example.com")
    assert taken.error_code == "USER_ALREADY_EXISTS"
    assert "priya@example.com" in taken.message


def test_domain_not_found_errors():
    user = UserNotFoundError("u-1", message="Patient not found")
    assert user.status_code == 404
    assert user.message == "Patient not found"
    assert user.details["resource_id"] == "u-1"

    appointment = AppointmentNotFoundError("a-1")
    assert appointment.error_code == "APPOINTMENT_NOT_FOUND"


def test_medication_error_reports_index():
    assert MissingMedicationFieldsError(index=2).details == {"medication_index": 2}
    assert MissingMedicationFieldsError().details == {}


def test_upstream_errors():
    ai = AIServiceError(original_error="timeout")
    assert ai.status_code == 503
    assert ai.details["original_error"] == "timeout"
    assert ai.details["retry_after_seconds"] == 60

    storage = StorageError(key="files/a.pdf")
    assert isinstance(storage, ExternalServiceError)
    assert storage.status_code == 502
    assert storage.details == {"service": "blob_storage", "key": "files/a.pdf"}

    upload = FileValidationError("File is empty", filename="scan.png")
    assert upload.status_code == 400
    assert upload.details["filename"] == "scan.png"
