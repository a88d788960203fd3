"""
Doctor Model.

A doctor profile keyed by email, optionally attached to a hospital roster
through ``hospital_id``. ``average_rating`` and ``total_ratings`` are
denormalized and rewritten after every rating submission.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .enums import VerificationStatus
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .hospital import Hospital


class Doctor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "doctors"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    specialization: Mapped[str] = mapped_column(String(200), nullable=False)
    qualifications: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="Years")
    languages: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    about: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    consultation_fees: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    hospital_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("hospitals.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    verification_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=VerificationStatus.PENDING.value,
    )

    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_ratings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    hospital: Mapped[Hospital | None] = relationship(
        back_populates="doctors",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_doctors_specialization", "specialization"),
        Index("ix_doctors_verification_status", "verification_status"),
    )

    def __repr__(self) -> str:
        return f"<Doctor(id={self.id}, email='{self.email}')>"
