"""Rating Repository - upsert and aggregation for ratings."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.rating import Rating

log = structlog.get_logger(__name__)


class RatingRepository:
    """Repository for Rating operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for_user(self, user_id: str, target_type: str, target_id: str) -> Rating | None:
        query = select(Rating).where(
            Rating.user_id == user_id,
            Rating.target_type == target_type,
            Rating.target_id == target_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_target(self, target_type: str, target_id: str) -> Sequence[Rating]:
        query = (
            select(Rating)
            .where(Rating.target_type == target_type, Rating.target_id == target_id)
            .order_by(Rating.created_at.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def aggregate(self, target_type: str, target_id: str) -> tuple[int, int]:
        """Return (sum of ratings, count) for the target."""
        query = select(
            func.coalesce(func.sum(Rating.rating), 0),
            func.count(Rating.id),
        ).where(Rating.target_type == target_type, Rating.target_id == target_id)
        total, count = (await self.session.execute(query)).one()
        return int(total), int(count)

    async def upsert(
        self,
        *,
        user_id: str,
        target_type: str,
        target_id: str,
        rating: int,
        review: str | None,
    ) -> tuple[Rating, bool]:
        """Create or overwrite the user's rating for a target.

        Returns:
            Tuple of (rating, created)
        """
        existing = await self.get_for_user(user_id, target_type, target_id)
        if existing is None:
            row = Rating(
                user_id=user_id,
                target_type=target_type,
                target_id=target_id,
                rating=rating,
                review=review,
            )
            self.session.add(row)
            try:
                await self.session.flush()
            except IntegrityError:
                # A concurrent first submission won; overwrite it instead.
                await self.session.rollback()
                existing = await self.get_for_user(user_id, target_type, target_id)
                if existing is None:
                    raise
            else:
                await self.session.refresh(row)
                log.info("rating_created", rating_id=row.id, target_type=target_type, target_id=target_id)
                return row, True

        existing.rating = rating
        existing.review = review
        await self.session.flush()
        await self.session.refresh(existing)
        log.info("rating_overwritten", rating_id=existing.id, target_type=target_type, target_id=target_id)
        return existing, False
