"""
Journal and Mood Models.

Private wellness records owned by one user: free-text journal entries
with an optional mood label, and standalone mood check-ins.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.session import Base
from .mixins import TimestampMixin, UUIDPrimaryKeyMixin, utc_now

MAX_MOOD_LENGTH = 50


class Journal(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "journals"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    mood: Mapped[str | None] = mapped_column(String(MAX_MOOD_LENGTH), nullable=True)

    def __repr__(self) -> str:
        return f"<Journal(id={self.id}, user_id={self.user_id})>"


class MoodEntry(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "moods"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    mood: Mapped[str] = mapped_column(String(MAX_MOOD_LENGTH), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (Index("ix_moods_user_date", "user_id", "date"),)
