"""
Rating Endpoints.

Exposed routes (all under /api/v1/ratings):
  POST /submit  - Create or overwrite a user's rating of a doctor or hospital
  GET  /get     - All ratings for a target with the computed average
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ....core.responses import GenericResponse
from ....db.session import DbSession
from ....schemas.rating import RatingResponse, RatingSubmit, RatingSubmitResult, RatingSummary
from ....services.rating_service import RatingService

router = APIRouter(prefix="/ratings")


def _get_rating_service(db: DbSession) -> RatingService:
    return RatingService(db)


RatingServiceDep = Annotated[RatingService, Depends(_get_rating_service)]


@router.post(
    "/submit",
    response_model=GenericResponse[RatingSubmitResult],
    summary="Submit a rating",
    description=(
        "Upsert keyed by (user, target type, target). The target's average "
        "and count are recomputed from all of its ratings."
    ),
    responses={
        400: {"description": "Missing fields, bad target type, rating outside 1-5 or review too long"},
        404: {"description": "Target doctor or hospital not found"},
    },
)
async def submit_rating(
    body: RatingSubmit,
    service: RatingServiceDep,
) -> GenericResponse[RatingSubmitResult]:
    rating, aggregate = await service.submit(
        user_id=body.user_id,
        target_type=body.target_type,
        target_id=body.target_id,
        rating=body.rating,
        review=body.review,
    )
    return GenericResponse(
        message="Rating submitted successfully",
        data=RatingSubmitResult(
            rating=RatingResponse.model_validate(rating),
            average_rating=aggregate.average_rating,
            total_ratings=aggregate.total_ratings,
        ),
    )


@router.get(
    "/get",
    response_model=GenericResponse[RatingSummary],
    summary="Get ratings for a target",
)
async def get_ratings(
    service: RatingServiceDep,
    target_type: str | None = Query(default=None, description="doctor or hospital"),
    target_id: str | None = Query(default=None),
    user_id: str | None = Query(default=None, description="Include this user's own rating"),
) -> GenericResponse[RatingSummary]:
    ratings, aggregate, user_rating = await service.get(
        target_type=target_type,
        target_id=target_id,
        user_id=user_id,
    )
    return GenericResponse(
        message="Ratings retrieved",
        data=RatingSummary(
            ratings=[RatingResponse.model_validate(r) for r in ratings],
            average_rating=aggregate.average_rating,
            total_ratings=aggregate.total_ratings,
            user_rating=RatingResponse.model_validate(user_rating) if user_rating else None,
        ),
    )
