"""
Rating Service.

Upserts a user's rating for a doctor or hospital, then recomputes the
target's average and count from all its ratings and writes them back,
all inside the request transaction.
"""
from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import BadRequestError, NotFoundError, UserNotFoundError
from ..core.invariants import (
    round_average,
    validate_rating_value,
    validate_review,
    validate_target_type,
)
from ..models.enums import RatingTargetType
from ..models.rating import Rating
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.hospital_repository import HospitalRepository
from ..repositories.rating_repository import RatingRepository
from ..repositories.user_repository import UserRepository

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RatingAggregate:
    average_rating: float
    total_ratings: int


class RatingService:
    def __init__(self, session: AsyncSession) -> None:
        self.ratings = RatingRepository(session)
        self.doctors = DoctorRepository(session)
        self.hospitals = HospitalRepository(session)
        self.users = UserRepository(session)

    async def _ensure_target(self, target_type: RatingTargetType, target_id: str) -> None:
        if target_type is RatingTargetType.DOCTOR:
            found = await self.doctors.get_by_id(target_id)
        else:
            found = await self.hospitals.get_by_id(target_id)
        if not found:
            raise NotFoundError(
                message=f"{target_type.value} not found",
                error_code="TARGET_NOT_FOUND",
                resource_type=target_type.value,
                resource_id=target_id,
            )

    async def recompute(self, target_type: RatingTargetType, target_id: str) -> RatingAggregate:
        total, count = await self.ratings.aggregate(target_type.value, target_id)
        aggregate = RatingAggregate(average_rating=round_average(total, count), total_ratings=count)

        if target_type is RatingTargetType.DOCTOR:
            await self.doctors.set_rating_aggregate(target_id, aggregate.average_rating, count)
        else:
            await self.hospitals.set_rating_aggregate(target_id, aggregate.average_rating, count)
        return aggregate

    async def submit(
        self,
        *,
        user_id: str | None,
        target_type: str | None,
        target_id: str | None,
        rating: object,
        review: str | None = None,
    ) -> tuple[Rating, RatingAggregate]:
        """
        Create or overwrite the rating, then refresh the target's aggregate.

        Raises:
            BadRequestError: missing fields, unknown target type, rating
                outside 1..5 or review over 500 characters
            NotFoundError: target doctor/hospital does not exist
            UserNotFoundError: no user with ``user_id``
        """
        if not user_id or not target_id or rating is None:
            raise BadRequestError(message="Missing required fields", error_code="MISSING_REQUIRED_FIELDS")
        kind = validate_target_type(target_type)
        value = validate_rating_value(rating)
        review = validate_review(review)

        await self._ensure_target(kind, target_id)
        if not await self.users.get_by_id(user_id):
            raise UserNotFoundError(user_id)

        row, created = await self.ratings.upsert(
            user_id=user_id,
            target_type=kind.value,
            target_id=target_id,
            rating=value,
            review=review,
        )
        aggregate = await self.recompute(kind, target_id)

        log.info(
            "rating_submitted",
            target_type=kind.value,
            target_id=target_id,
            created=created,
            average_rating=aggregate.average_rating,
            total_ratings=aggregate.total_ratings,
        )
        return row, aggregate

    async def get(
        self,
        *,
        target_type: str | None,
        target_id: str | None,
        user_id: str | None = None,
    ) -> tuple[list[Rating], RatingAggregate, Rating | None]:
        """Ratings newest first, the computed aggregate and the caller's own rating."""
        if not target_id:
            raise BadRequestError(message="Missing required fields", error_code="MISSING_REQUIRED_FIELDS")
        kind = validate_target_type(target_type)

        ratings = list(await self.ratings.list_for_target(kind.value, target_id))
        total = sum(r.rating for r in ratings)
        aggregate = RatingAggregate(
            average_rating=round_average(total, len(ratings)),
            total_ratings=len(ratings),
        )

        user_rating = None
        if user_id:
            user_rating = next((r for r in ratings if r.user_id == user_id), None)
        return ratings, aggregate, user_rating
