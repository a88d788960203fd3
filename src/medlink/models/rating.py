"""
Rating Model.

Polymorphic (target_type, target_id) reference to a Doctor or Hospital.
One row per (user, target); resubmission overwrites it.
"""
from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..db.session import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

MAX_REVIEW_LENGTH = 500


class Rating(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "ratings"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_type: Mapped[str] = mapped_column(String(20), nullable=False, comment="doctor or hospital")
    target_id: Mapped[str] = mapped_column(String(36), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(String(MAX_REVIEW_LENGTH), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_ratings_user_target"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
        Index("ix_ratings_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<Rating(user_id={self.user_id}, {self.target_type}={self.target_id}, rating={self.rating})>"
