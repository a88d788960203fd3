"""
Prescription Model.

One prescription per appointment (unique ``appointment_id``). Medications
are an ordered JSON list of {name, dosage, frequency, duration, notes?}.
Deletion is a status change to ``Cancelled``; rows are never removed.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .enums import PrescriptionStatus
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .doctor import Doctor
    from .user import User


class Prescription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "prescriptions"

    patient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Not a foreign key: the encounter id is an opaque reference.
    appointment_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PrescriptionStatus.ACTIVE.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    follow_up_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    medications: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    patient: Mapped[User] = relationship(lazy="selectin")
    doctor: Mapped[Doctor] = relationship(lazy="selectin")

    __table_args__ = (Index("ix_prescriptions_doctor_patient", "doctor_id", "patient_id"),)

    def __repr__(self) -> str:
        return f"<Prescription(id={self.id}, appointment_id={self.appointment_id}, status='{self.status}')>"
