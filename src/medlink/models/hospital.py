"""
Hospital Model.

A hospital profile keyed by email. The address is stored flat with a
geocoded point (longitude, latitude). Doctors join the roster by pointing
at the hospital; nothing is embedded here.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import JSON, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .doctor import Doctor

MAX_HOSPITAL_IMAGES = 4


class Hospital(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "hospitals"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Address
    street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    images: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Up to 4 blob URIs",
    )

    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_ratings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    doctors: Mapped[list[Doctor]] = relationship(back_populates="hospital")

    __table_args__ = (Index("ix_hospitals_city", "city"),)

    @property
    def coordinates(self) -> list[float]:
        """GeoJSON order: [longitude, latitude]."""
        return [self.longitude, self.latitude]

    def __repr__(self) -> str:
        return f"<Hospital(id={self.id}, name='{self.name}', city='{self.city}')>"
