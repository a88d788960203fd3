"""
Appointment Model.

The slot (doctor_id, date, time) is held by at most one appointment whose
status is not ``cancelled``. The partial unique index below makes the
database reject a concurrent double booking; the repository also performs
a conflict lookup before inserting so the common case fails fast.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .enums import AppointmentStatus, AppointmentType, PaymentStatus
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .doctor import Doctor
    from .user import User

ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"
_NOT_CANCELLED = text("status <> 'cancelled'")


class Appointment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "appointments"

    user_id: Mapped[str] = mapped_column(
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
    date: Mapped[str] = mapped_column(String(10), nullable=False, comment="YYYY-MM-DD")
    time: Mapped[str] = mapped_column(String(10), nullable=False, comment="Slot label, e.g. 10:00")
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AppointmentStatus.BOOKED.value,
    )
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AppointmentType.IN_PERSON.value,
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.UNPAID.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped[User] = relationship(lazy="selectin")
    doctor: Mapped[Doctor] = relationship(lazy="selectin")

    __table_args__ = (
        Index(
            ACTIVE_SLOT_INDEX,
            "doctor_id",
            "date",
            "time",
            unique=True,
            postgresql_where=_NOT_CANCELLED,
            sqlite_where=_NOT_CANCELLED,
        ),
        Index("ix_appointments_doctor_schedule", "doctor_id", "date", "time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, "
            f"slot='{self.date} {self.time}', status='{self.status}')>"
        )
