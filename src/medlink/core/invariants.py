"""Domain rules shared by the appointment, prescription and rating flows.

Pure functions only; persistence-backed checks (slot conflict lookup,
prescription existence) live in the repositories and are driven by the
services.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..models.enums import AppointmentStatus, RatingTargetType
from .exceptions import BadRequestError, MissingMedicationFieldsError

REQUIRED_MEDICATION_FIELDS = ("name", "dosage", "frequency", "duration")
MIN_RATING = 1
MAX_RATING = 5
MAX_REVIEW_LENGTH = 500


def holds_slot(status: str) -> bool:
    """Whether an appointment in ``status`` occupies its (doctor, date, time) slot."""
    return status != AppointmentStatus.CANCELLED.value


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_medications(medications: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Check every entry has name, dosage, frequency and duration.

    Returns the entries as plain dicts in their original order. An empty
    list is rejected as a missing required field.
    """
    entries = list(medications or [])
    if not entries:
        raise BadRequestError(
            message="Patient ID, Appointment ID, and medications are required",
            error_code="MISSING_REQUIRED_FIELDS",
        )

    cleaned: list[dict[str, Any]] = []
    for index, entry in enumerate(entries):
        if any(_blank(entry.get(field)) for field in REQUIRED_MEDICATION_FIELDS):
            raise MissingMedicationFieldsError(index=index)
        item = {field: str(entry[field]).strip() for field in REQUIRED_MEDICATION_FIELDS}
        notes = entry.get("notes")
        item["notes"] = notes.strip() if isinstance(notes, str) and notes.strip() else None
        cleaned.append(item)
    return cleaned


def validate_target_type(target_type: str | None) -> RatingTargetType:
    if not target_type:
        raise BadRequestError(message="Missing required fields", error_code="MISSING_REQUIRED_FIELDS")
    try:
        return RatingTargetType(target_type)
    except ValueError as exc:
        raise BadRequestError(
            message="Invalid target type",
            error_code="INVALID_TARGET_TYPE",
            details={"allowed": [t.value for t in RatingTargetType]},
        ) from exc


def validate_rating_value(rating: Any) -> int:
    """Accept integers 1..5 (bools are not ratings)."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise BadRequestError(message="Rating must be an integer", error_code="INVALID_RATING")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise BadRequestError(
            message="Rating must be between 1 and 5",
            error_code="INVALID_RATING",
        )
    return rating


def validate_review(review: str | None) -> str | None:
    if review is None:
        return None
    if len(review) > MAX_REVIEW_LENGTH:
        raise BadRequestError(
            message=f"Review must be at most {MAX_REVIEW_LENGTH} characters",
            error_code="REVIEW_TOO_LONG",
        )
    return review


def round_average(total: int | float | Decimal | None, count: int) -> float:
    """Mean rounded half-up to one decimal; 0 when there are no ratings.

    >>> round_average(9, 4)
    2.3
    """
    if not count or total is None:
        return 0.0
    mean = Decimal(str(total)) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
