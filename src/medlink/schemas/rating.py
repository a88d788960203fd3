"""Rating schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from .common import ORMModel, RequestModel


class RatingSubmit(RequestModel):
    """Range, length and target type are checked by the service (400)."""

    user_id: str | None = None
    target_type: str | None = None
    target_id: str | None = None
    rating: Any = None
    review: str | None = None


class RatingResponse(ORMModel):
    id: str
    user_id: str
    target_type: str
    target_id: str
    rating: int
    review: str | None = None
    created_at: datetime
    updated_at: datetime


class RatingSubmitResult(ORMModel):
    rating: RatingResponse
    average_rating: float
    total_ratings: int


class RatingSummary(ORMModel):
    ratings: list[RatingResponse]
    average_rating: float
    total_ratings: int
    user_rating: RatingResponse | None = None
